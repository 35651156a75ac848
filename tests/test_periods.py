"""Tests for weekly and monthly bucketing."""

from datetime import datetime, timedelta

from fitclub.stats.calculator import compute_stats
from fitclub.stats.periods import bucket_by_month, bucket_by_week

# Friday
NOW = datetime(2024, 3, 15, 12, 0)


def test_week_buckets_start_on_sunday_most_recent_first():
    buckets = bucket_by_week([], NOW, week_count=3)

    assert [(b.week_start, b.week_end) for b in buckets] == [
        ("2024-03-10", "2024-03-17"),
        ("2024-03-03", "2024-03-10"),
        ("2024-02-25", "2024-03-03"),
    ]


def test_empty_week_keeps_zero_stats():
    buckets = bucket_by_week([], NOW, week_count=4)

    assert len(buckets) == 4
    for bucket in buckets:
        assert bucket.stats == compute_stats([])
        assert bucket.activities == []


def test_week_boundaries_are_start_inclusive_end_exclusive(activity_factory):
    on_sunday = activity_factory(start=datetime(2024, 3, 10, 0, 0))
    saturday_night = activity_factory(start=datetime(2024, 3, 9, 23, 59))

    current, previous = bucket_by_week([on_sunday, saturday_night], NOW, week_count=2)

    assert [a.id for a in current.activities] == [on_sunday.id]
    assert [a.id for a in previous.activities] == [saturday_night.id]


def test_activities_before_window_are_dropped(activity_factory):
    old = activity_factory(start=datetime(2024, 1, 2, 8, 0))
    recent = activity_factory(start=datetime(2024, 3, 12, 8, 0))

    buckets = bucket_by_week([old, recent], NOW, week_count=2)

    ids = [a.id for b in buckets for a in b.activities]
    assert ids == [recent.id]
    assert buckets[0].stats.total_activities == 1


def test_week_buckets_are_disjoint_and_complete(activity_factory):
    window_start = datetime(2024, 2, 18)
    activities = [
        activity_factory(start=window_start + timedelta(hours=13 * i)) for i in range(70)
    ]
    in_window = [a for a in activities if a.start_date_local < datetime(2024, 3, 17)]

    buckets = bucket_by_week(activities, NOW, week_count=4)

    seen = [a.id for b in buckets for a in b.activities]
    assert len(seen) == len(set(seen))
    assert set(seen) == {a.id for a in in_window}


def test_week_bucket_members_newest_first(activity_factory):
    first = activity_factory(start=datetime(2024, 3, 11, 7, 0))
    second = activity_factory(start=datetime(2024, 3, 13, 7, 0))

    (bucket,) = bucket_by_week([first, second], NOW, week_count=1)

    assert [a.id for a in bucket.activities] == [second.id, first.id]
    assert bucket.stats.total_distance == 10000


def test_bucketing_is_idempotent(activity_factory):
    activities = [activity_factory(start=NOW - timedelta(days=d)) for d in range(0, 60, 3)]

    assert bucket_by_week(activities, NOW, 6) == bucket_by_week(activities, NOW, 6)
    assert bucket_by_month(activities, NOW, 3) == bucket_by_month(activities, NOW, 3)


def test_month_buckets_cover_calendar_months(activity_factory):
    activities = [
        activity_factory(start=datetime(2024, 3, 1, 0, 0)),
        activity_factory(start=datetime(2024, 2, 29, 23, 0)),
        activity_factory(start=datetime(2024, 1, 31, 6, 0)),
        activity_factory(start=datetime(2023, 12, 31, 6, 0)),
    ]

    buckets = bucket_by_month(activities, NOW, month_count=3)

    assert [(b.month, b.year) for b in buckets] == [
        ("March", 2024),
        ("February", 2024),
        ("January", 2024),
    ]
    assert [(b.month_start, b.month_end) for b in buckets] == [
        ("2024-03-01", "2024-03-31"),
        ("2024-02-01", "2024-02-29"),
        ("2024-01-01", "2024-01-31"),
    ]
    assert [b.stats.total_activities for b in buckets] == [1, 1, 1]

    seen = [a.id for b in buckets for a in b.activities]
    assert len(seen) == len(set(seen)) == 3
    assert activities[3].id not in seen


def test_month_buckets_cross_year_boundary():
    buckets = bucket_by_month([], datetime(2024, 2, 10), month_count=3)

    assert [(b.month, b.year) for b in buckets] == [
        ("February", 2024),
        ("January", 2024),
        ("December", 2023),
    ]
