"""Pure functions for activity statistics.

No database access and no logging - these functions take normalized
``ActivityRecord`` objects and return schemas, so they can be tested
independently and called from any service.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timedelta
from math import fsum

from fitclub.stats.schemas import ActivityRecord, AggregateStats, TypeTotals

METERS_PER_KM = 1000
METERS_PER_MILE = 1609.34


def format_moving_time(seconds: int) -> str:
    """Render a duration as ``"{h}h {m}m"``, or ``"{m}m"`` under one hour.

    Parameters
    ----------
    seconds : int
        Duration in seconds

    Returns
    -------
    str
        Human readable duration, e.g. ``"1h 5m"`` or ``"30m"``
    """
    hours, remainder = divmod(int(seconds or 0), 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def meters_to_km(meters: float) -> float:
    return round(meters / METERS_PER_KM, 2)


def meters_to_miles(meters: float) -> float:
    return round(meters / METERS_PER_MILE, 2)


def totals_by_type(activities: Iterable[ActivityRecord]) -> dict[str, TypeTotals]:
    """Count, distance, moving time and elevation per activity type."""
    groups: dict[str, list[ActivityRecord]] = defaultdict(list)
    for activity in activities:
        groups[activity.type].append(activity)

    return {
        activity_type: TypeTotals(
            count=len(group),
            distance=fsum(a.distance for a in group),
            moving_time=sum(a.moving_time for a in group),
            elevation_gain=fsum(a.total_elevation_gain for a in group),
        )
        for activity_type, group in groups.items()
    }


def compute_stats(activities: Iterable[ActivityRecord]) -> AggregateStats:
    """Aggregate a set of activities.

    Parameters
    ----------
    activities : Iterable[ActivityRecord]
        Any finite collection, possibly empty

    Returns
    -------
    AggregateStats
        Totals, averages and per-type subtotals

    Notes
    -----
    - An empty set gives zero totals, ``"0h 0m"`` and None heart rate.
    - ``total_calories`` sums provider-reported calories only; missing
      values count as 0 (the calorie model is a leaderboard concern).
    - ``average_speed`` is the plain mean over all activities, not weighted
      by duration; activities without a speed count as 0.
    - Heart rate is averaged only over activities that reported it.
    - Results do not depend on input order.
    """
    activities = list(activities)
    if not activities:
        return AggregateStats()

    total_distance = fsum(a.distance for a in activities)
    total_moving_time = sum(a.moving_time for a in activities)
    total_elapsed_time = sum(a.elapsed_time for a in activities)
    total_elevation_gain = fsum(a.total_elevation_gain for a in activities)
    total_calories = fsum(a.calories or 0 for a in activities)

    average_speed = fsum(a.average_speed or 0 for a in activities) / len(activities)
    max_speed = max(a.max_speed or 0 for a in activities)

    hr_activities = [a for a in activities if a.average_heartrate]
    average_heartrate = None
    max_heartrate = None
    if hr_activities:
        average_heartrate = round(
            fsum(a.average_heartrate for a in hr_activities) / len(hr_activities)
        )
        max_hr = max(a.max_heartrate or 0 for a in hr_activities)
        # None rather than 0 when only averages were reported
        max_heartrate = round(max_hr) if max_hr else None

    return AggregateStats(
        total_activities=len(activities),
        total_distance=round(total_distance),
        total_distance_km=meters_to_km(total_distance),
        total_distance_miles=meters_to_miles(total_distance),
        total_moving_time=total_moving_time,
        total_moving_time_formatted=format_moving_time(total_moving_time),
        total_elapsed_time=total_elapsed_time,
        total_elevation_gain=round(total_elevation_gain),
        total_calories=round(total_calories),
        average_speed=round(average_speed, 2),
        max_speed=round(max_speed, 2),
        average_heartrate=average_heartrate,
        max_heartrate=max_heartrate,
        by_type=totals_by_type(activities),
    )


def get_week_boundaries(date: datetime) -> tuple[datetime, datetime]:
    """Get Sunday 00:00 and next Sunday 00:00 for given date.

    Parameters
    ----------
    date : datetime
        Any date within the week

    Returns
    -------
    tuple[datetime, datetime]
        (week_start, week_end), end exclusive

    Notes
    -----
    Weeks run Sunday to Saturday. Works on naive wall-clock datetimes,
    matching ``start_date_local``.
    """
    # weekday(): 0=Monday ... 6=Sunday
    days_since_sunday = (date.weekday() + 1) % 7

    week_start = date - timedelta(days=days_since_sunday)
    week_start = week_start.replace(hour=0, minute=0, second=0, microsecond=0)

    return week_start, week_start + timedelta(days=7)


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move ``offset`` calendar months from (year, month); negative goes back."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    """First instant of the month and first instant of the next one."""
    next_year, next_month = shift_month(year, month, 1)
    return datetime(year, month, 1), datetime(next_year, next_month, 1)
