"""Tests for screen formatters."""

from datetime import datetime

from fitclub.stats.formatters import (
    available_months,
    calendar_info,
    categorize_activity,
    format_distance,
    format_duration,
    history_view,
    month_view,
    profile_totals,
    recent_activities,
)

NOW = datetime(2024, 3, 15, 12, 0)


def test_format_duration():
    duration = format_duration(3900)

    assert (duration.hours, duration.minutes, duration.total_minutes) == (1, 5, 65)
    assert duration.formatted == "1h 5m"
    assert format_duration(None).formatted == "0h 0m"


def test_format_distance():
    assert format_distance(5234.5).formatted == "5.23 km"
    assert format_distance(5234.5).meters == 5234
    assert format_distance(0).formatted == "0.00 km"


def test_categorize_by_time_of_day(activity_factory):
    assert categorize_activity(activity_factory(start=datetime(2024, 3, 15, 6, 30))) == "Morning Run"
    assert (
        categorize_activity(activity_factory(activity_type="Walk", start=datetime(2024, 3, 15, 19, 0)))
        == "Evening Walk"
    )
    assert categorize_activity(activity_factory(start=datetime(2024, 3, 15, 14, 0))) == "Run"
    assert (
        categorize_activity(activity_factory(activity_type="Yoga", name="Flow", start=datetime(2024, 3, 15, 8, 0)))
        == "Yoga"
    )


def test_profile_distance_counts_only_runs_and_walks(activity_factory):
    activities = [
        activity_factory(activity_type="Run", distance=5000, moving_time=1800),
        activity_factory(activity_type="Walk", distance=2500, moving_time=1800),
        activity_factory(activity_type="Ride", distance=40000, moving_time=3600),
    ]

    totals = profile_totals(activities)

    assert totals.total_activities == 3
    assert totals.total_km == 7.5
    assert totals.total_km_formatted == "7.50 km"
    assert (totals.total_hours, totals.total_minutes) == (2, 0)
    assert totals.total_time_formatted == "2h 0m"


def test_recent_activities_since_midnight_three_days_ago(activity_factory):
    included = activity_factory(start=datetime(2024, 3, 12, 0, 5))
    newest = activity_factory(start=datetime(2024, 3, 15, 7, 0))
    excluded = activity_factory(start=datetime(2024, 3, 11, 23, 55))

    recent = recent_activities([included, excluded, newest], NOW)

    assert recent.count == 2
    assert recent.period == "Last 3 days"
    assert [a.id for a in recent.activities] == [newest.id, included.id]
    assert recent.activities[0].display_date_time == "Fri 07:00 AM"


def test_calendar_info():
    calendar = calendar_info(NOW)

    assert calendar.day == "Friday"
    assert calendar.formatted == "Friday, March 15, 2024"


def test_month_view(activity_factory):
    activities = [
        activity_factory(start=datetime(2024, 2, 3, 7, 0), distance=4000, moving_time=1200),
        activity_factory(start=datetime(2024, 2, 20, 7, 0), distance=6000, moving_time=2400),
        activity_factory(start=datetime(2024, 3, 1, 7, 0)),
        activity_factory(start=datetime(2023, 11, 5, 7, 0)),
    ]

    view = month_view(activities, 2024, 2)

    assert view.filter.formatted == "February 2024"
    assert view.summary.total_activities == 2
    assert view.summary.total_km_formatted == "10.00 km"
    assert view.summary.total_time == "1h 0m"
    assert [a.date for a in view.activities] == ["2024-02-20", "2024-02-03"]
    assert view.available_months == ["2024-03", "2024-02", "2023-11"]


def test_available_months_empty():
    assert available_months([]) == []


def test_history_filters_and_breakdown(activity_factory):
    activities = [
        activity_factory(activity_type="Run", start=datetime(2024, 1, 5, 7, 0)),
        activity_factory(activity_type="Ride", start=datetime(2024, 2, 5, 7, 0), distance=20000),
        activity_factory(activity_type="Run", start=datetime(2023, 12, 5, 7, 0)),
    ]

    view = history_view(activities, year=2024)

    assert view.total_activities == 2
    assert view.summary.total_distance == 25000
    assert set(view.type_breakdown) == {"Run", "Ride"}
    assert view.activities[0].type == "Ride"

    runs = history_view(activities, activity_type="Run", limit=1)
    assert runs.total_activities == 1
    assert runs.activities[0].date == datetime(2024, 1, 5, 7, 0)
