"""Shape activities and stats for the mobile screens.

Pure functions: the caller fetches and normalizes activities, passes ``now``
explicitly, and serializes the returned schemas.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from typing import Optional

from fitclub.stats.calculator import (
    compute_stats,
    format_moving_time,
    meters_to_km,
    month_range,
)
from fitclub.stats.schemas import (
    ActivityListItem,
    ActivityRecord,
    ActivitySummary,
    AthleteCard,
    CalendarInfo,
    DistanceInfo,
    DurationInfo,
    HistoryFilters,
    HistoryView,
    MonthFilter,
    MonthSummary,
    MonthView,
    ProfileTotals,
    RecentActivities,
)

# Only these types count towards the headline distance
DISTANCE_TYPES = frozenset({"Run", "Walk"})


def format_duration(seconds: Optional[int]) -> DurationInfo:
    """Split seconds into hours/minutes with a display string."""
    if not seconds:
        return DurationInfo()
    hours, remainder = divmod(int(seconds), 3600)
    return DurationInfo(
        hours=hours,
        minutes=remainder // 60,
        total_minutes=int(seconds) // 60,
        formatted=format_moving_time(seconds),
    )


def format_distance(meters: Optional[float]) -> DistanceInfo:
    if not meters:
        return DistanceInfo()
    km = meters / 1000
    return DistanceInfo(km=round(km, 2), meters=round(meters), formatted=f"{km:.2f} km")


def categorize_activity(activity: ActivityRecord) -> str:
    """Friendly label such as "Morning Run" or "Evening Walk"."""
    name = activity.name.lower()
    activity_type = activity.type.lower()
    hour = activity.start_date_local.hour

    is_walk = activity_type == "walk" or "walk" in name
    is_run = activity_type == "run" or "run" in name

    if "morning" in name or hour < 12:
        if is_walk:
            return "Morning Walk"
        if is_run:
            return "Morning Run"
    if "evening" in name or hour >= 17:
        if is_walk:
            return "Evening Walk"
        if is_run:
            return "Evening Run"

    return {"walk": "Walk", "run": "Run", "ride": "Ride"}.get(
        activity_type, activity.type or "Other"
    )


def activity_summary(activity: ActivityRecord) -> ActivitySummary:
    return ActivitySummary(
        id=activity.id,
        name=activity.name,
        type=activity.type,
        sport_type=activity.sport_type,
        date=activity.start_date_local,
        distance=activity.distance,
        distance_km=meters_to_km(activity.distance),
        moving_time=activity.moving_time,
        moving_time_formatted=format_moving_time(activity.moving_time),
        elapsed_time=activity.elapsed_time,
        elevation_gain=activity.total_elevation_gain,
        average_speed=activity.average_speed,
        max_speed=activity.max_speed,
        average_heartrate=activity.average_heartrate,
        max_heartrate=activity.max_heartrate,
        calories=activity.calories,
        kudos_count=activity.kudos_count,
        has_map=activity.has_map,
    )


def activity_list_item(activity: ActivityRecord) -> ActivityListItem:
    start = activity.start_date_local
    day_name = start.strftime("%a")
    time_label = start.strftime("%I:%M %p")
    distance = format_distance(activity.distance)
    return ActivityListItem(
        id=activity.id,
        name=activity.name,
        category=categorize_activity(activity),
        type=activity.type,
        sport_type=activity.sport_type,
        date=start.strftime("%Y-%m-%d"),
        day=start.day,
        day_name=day_name,
        time=time_label,
        display_date_time=f"{day_name} {time_label}",
        distance_km=distance.km,
        distance_formatted=distance.formatted,
        duration=format_duration(activity.moving_time),
        elevation_gain=activity.total_elevation_gain,
        calories=activity.calories or 0,
        average_speed=activity.average_speed or 0,
        max_speed=activity.max_speed or 0,
        has_map=activity.has_map,
    )


def _newest_first(activities: Iterable[ActivityRecord]) -> list[ActivityRecord]:
    return sorted(activities, key=lambda a: (a.start_date_local, a.id), reverse=True)


def profile_totals(activities: Sequence[ActivityRecord]) -> ProfileTotals:
    """Headline totals: km over runs and walks, time over every activity."""
    distance = format_distance(
        sum(a.distance for a in activities if a.type in DISTANCE_TYPES)
    )
    duration = format_duration(sum(a.moving_time for a in activities))
    return ProfileTotals(
        total_activities=len(activities),
        total_km=distance.km,
        total_km_formatted=distance.formatted,
        total_hours=duration.hours,
        total_minutes=duration.minutes,
        total_time_formatted=duration.formatted,
    )


def recent_activities(
    activities: Iterable[ActivityRecord], now: datetime, days: int = 3
) -> RecentActivities:
    """Activities since local midnight ``days`` days ago, newest first."""
    since = (now - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    recent = [a for a in _newest_first(activities) if a.start_date_local >= since]
    return RecentActivities(
        count=len(recent),
        period=f"Last {days} days",
        activities=[activity_list_item(a) for a in recent],
    )


def calendar_info(now: datetime) -> CalendarInfo:
    return CalendarInfo(
        date=now.day,
        day=now.strftime("%A"),
        month=now.strftime("%B"),
        year=now.year,
        formatted=f"{now.strftime('%A, %B')} {now.day}, {now.year}",
    )


def athlete_card(athlete) -> AthleteCard:
    """Public profile fields from an ``Athlete`` row."""
    return AthleteCard(
        id=athlete.id,
        firstname=athlete.firstname,
        lastname=athlete.lastname,
        full_name=athlete.full_name,
        profile=athlete.profile,
        profile_medium=athlete.profile_medium,
        city=athlete.city,
        state=athlete.state,
        country=athlete.country,
        sex=athlete.sex,
        premium=athlete.premium,
        joined_at=athlete.created_at,
    )


def available_months(activities: Iterable[ActivityRecord]) -> list[str]:
    """Distinct ``YYYY-MM`` months with activity, newest first."""
    return sorted({a.start_date_local.strftime("%Y-%m") for a in activities}, reverse=True)


def month_view(activities: Sequence[ActivityRecord], year: int, month: int) -> MonthView:
    """Activities of one calendar month with a summary.

    ``activities`` is the athlete's full list; it also feeds the month picker.
    """
    start, end = month_range(year, month)
    in_month = [a for a in _newest_first(activities) if start <= a.start_date_local < end]

    total_distance = format_distance(sum(a.distance for a in in_month))
    month_name = start.strftime("%B")

    return MonthView(
        filter=MonthFilter(
            month=month, month_name=month_name, year=year, formatted=f"{month_name} {year}"
        ),
        summary=MonthSummary(
            total_activities=len(in_month),
            total_km=total_distance.km,
            total_km_formatted=total_distance.formatted,
            total_time=format_duration(sum(a.moving_time for a in in_month)).formatted,
        ),
        available_months=available_months(activities),
        activities=[activity_list_item(a) for a in in_month],
    )


def history_view(
    activities: Iterable[ActivityRecord],
    year: Optional[int] = None,
    activity_type: Optional[str] = None,
    limit: int = 100,
) -> HistoryView:
    """Most recent ``limit`` activities with overall and per-type stats."""
    selected = [
        a
        for a in _newest_first(activities)
        if (year is None or a.start_date_local.year == year)
        and (activity_type is None or a.type == activity_type)
    ][:limit]

    by_type: dict[str, list[ActivityRecord]] = {}
    for activity in selected:
        by_type.setdefault(activity.type, []).append(activity)

    return HistoryView(
        filters=HistoryFilters(year=year, type=activity_type, limit=limit),
        summary=compute_stats(selected),
        type_breakdown={t: compute_stats(group) for t, group in by_type.items()},
        total_activities=len(selected),
        activities=[activity_summary(a) for a in selected],
    )
