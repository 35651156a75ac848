"""Partition activities into weekly and monthly buckets.

Buckets are ordered most recent first and are pairwise disjoint. Activities
outside the covered range are dropped. Every bucket
is present even when empty, carrying the zero stats result.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from fitclub.stats.calculator import (
    compute_stats,
    get_week_boundaries,
    month_range,
    shift_month,
)
from fitclub.stats.formatters import activity_summary
from fitclub.stats.schemas import ActivityRecord, MonthBucket, WeekBucket

DATE_FORMAT = "%Y-%m-%d"


def _members(
    activities: list[ActivityRecord], start: datetime, end: datetime
) -> list[ActivityRecord]:
    members = [a for a in activities if start <= a.start_date_local < end]
    members.sort(key=lambda a: (a.start_date_local, a.id), reverse=True)
    return members


def bucket_by_week(
    activities: Iterable[ActivityRecord], now: datetime, week_count: int = 4
) -> list[WeekBucket]:
    """Split activities into Sunday-start weeks ending with the current one.

    Parameters
    ----------
    activities : Iterable[ActivityRecord]
        Activities of a single athlete
    now : datetime
        Naive local "now"; the current week starts on the Sunday at or before it
    week_count : int
        Number of buckets to build

    Returns
    -------
    list[WeekBucket]
        ``week_count`` buckets, most recent first
    """
    activities = list(activities)
    current_start, _ = get_week_boundaries(now)

    buckets = []
    for offset in range(week_count):
        week_start = current_start - timedelta(weeks=offset)
        week_end = week_start + timedelta(days=7)
        members = _members(activities, week_start, week_end)
        buckets.append(
            WeekBucket(
                week_start=week_start.strftime(DATE_FORMAT),
                week_end=week_end.strftime(DATE_FORMAT),
                week_number=week_start.isocalendar()[1],
                stats=compute_stats(members),
                activities=[activity_summary(a) for a in members],
            )
        )
    return buckets


def bucket_by_month(
    activities: Iterable[ActivityRecord], now: datetime, month_count: int = 6
) -> list[MonthBucket]:
    """Split activities into calendar months ending with ``now``'s month.

    Parameters
    ----------
    activities : Iterable[ActivityRecord]
        Activities of a single athlete
    now : datetime
        Naive local "now"
    month_count : int
        Number of buckets to build

    Returns
    -------
    list[MonthBucket]
        ``month_count`` buckets, most recent first. ``month_end`` is the last
        day of the month.
    """
    activities = list(activities)

    buckets = []
    for offset in range(month_count):
        year, month = shift_month(now.year, now.month, -offset)
        month_start, next_month_start = month_range(year, month)
        members = _members(activities, month_start, next_month_start)
        buckets.append(
            MonthBucket(
                month=month_start.strftime("%B"),
                year=year,
                month_start=month_start.strftime(DATE_FORMAT),
                month_end=(next_month_start - timedelta(days=1)).strftime(DATE_FORMAT),
                stats=compute_stats(members),
                activities=[activity_summary(a) for a in members],
            )
        )
    return buckets
