"""Pure functions for leaderboard ranking.

No database access - the service layer loads athletes and activities,
maps them to records and hands them over together with ``now``.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta
from math import fsum
from typing import Optional

from fitclub.scoring.schemas import AthleteRank, LeaderboardEntry, RankStats, TopPerformer
from fitclub.stats.calories import estimate_calories
from fitclub.stats.schemas import ActivityRecord, AthleteRecord

# period -> days looked back from today's midnight (None = no lower bound)
PERIOD_DAYS: dict[str, Optional[int]] = {
    "week": 7,
    "7days": 7,
    "month": 30,
    "30days": 30,
    "all": None,
}

PERIOD_LABELS = {7: "Last 1 Week", 30: "Last 1 Month", None: "All Time"}

# Display labels used by the app's filter chips
TYPE_ALIASES = {"Cycle Ride": "Ride"}

ALL_TYPES = "all"

# Size of the leaderboard podium and of the daily top performers
TOP_N = 3

PODIUM_BADGES = ("Today's Leader", "2nd Place", "3rd Place")


def resolve_period_start(period: str, now: datetime) -> Optional[datetime]:
    """Get the inclusive lower bound of a leaderboard period.

    Parameters
    ----------
    period : str
        One of 'week', '7days', 'month', '30days', 'all'
    now : datetime
        Naive local "now"

    Returns
    -------
    datetime | None
        Local midnight ``N`` days before ``now``, or None for 'all'

    Raises
    ------
    ValueError
        If period is not one of the valid options
    """
    if period not in PERIOD_DAYS:
        raise ValueError(
            f"Invalid period: {period}. Must be one of: {', '.join(PERIOD_DAYS)}"
        )

    days = PERIOD_DAYS[period]
    if days is None:
        return None

    start = now - timedelta(days=days)
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


def period_label(period: str) -> str:
    return PERIOD_LABELS[PERIOD_DAYS[period]]


def normalize_activity_type(activity_type: Optional[str]) -> Optional[str]:
    """Map a filter value to a Strava type; None means no type filter."""
    if not activity_type or activity_type.lower() == ALL_TYPES:
        return None
    return TYPE_ALIASES.get(activity_type, activity_type)


def filter_activities(
    activities: Iterable[ActivityRecord],
    start: Optional[datetime],
    activity_type: Optional[str] = None,
) -> list[ActivityRecord]:
    """Keep activities starting at or after ``start`` and matching the type."""
    return [
        a
        for a in activities
        if (start is None or a.start_date_local >= start)
        and (activity_type is None or a.type == activity_type)
    ]


def calculate_score(distance_km: float, activity_count: int, total_time_seconds: int) -> float:
    """Composite leaderboard score.

    One point per kilometer, two per activity and one per hour of moving time.

    Examples
    --------
    >>> calculate_score(10.0, 2, 1800)
    14.5
    """
    return distance_km + activity_count * 2 + total_time_seconds / 3600


def build_entry(athlete: AthleteRecord, activities: Sequence[ActivityRecord]) -> LeaderboardEntry:
    """Aggregate one athlete's already-filtered activities into an unranked entry."""
    total_distance = fsum(a.distance for a in activities)
    total_time_seconds = sum(a.moving_time for a in activities)
    total_elevation = fsum(a.total_elevation_gain for a in activities)
    calories = fsum(
        estimate_calories(a.type, a.moving_time / 60, athlete.weight, a.total_elevation_gain)
        for a in activities
    )

    distance_km = total_distance / 1000
    last_activity = max((a.start_date_local for a in activities), default=None)

    return LeaderboardEntry(
        athlete_id=athlete.id,
        display_name=athlete.display_name,
        profile=athlete.profile_medium or athlete.profile,
        city=athlete.city,
        country=athlete.country,
        total_distance_km=round(distance_km, 2),
        total_time_minutes=round(total_time_seconds / 60),
        total_elevation_gain_meters=round(total_elevation),
        calories_burned=round(calories),
        activity_count=len(activities),
        workout_days=len({a.start_date_local.strftime("%Y-%m-%d") for a in activities}),
        last_activity_date=last_activity,
        score=calculate_score(distance_km, len(activities), total_time_seconds),
    )


def rank_leaderboard(
    athletes: Iterable[AthleteRecord],
    activities_by_athlete: Mapping[int, Sequence[ActivityRecord]],
    period: str,
    activity_type: Optional[str],
    now: datetime,
) -> list[LeaderboardEntry]:
    """Rank every athlete in the population for a period.

    Parameters
    ----------
    athletes : Iterable[AthleteRecord]
        The full population; athletes without activities score 0
    activities_by_athlete : Mapping[int, Sequence[ActivityRecord]]
        Activities keyed by athlete ID; may contain more than the window
    period : str
        Leaderboard period (see ``resolve_period_start``)
    activity_type : str | None
        Type filter; None or 'all' disables it
    now : datetime
        Naive local "now"

    Returns
    -------
    list[LeaderboardEntry]
        Entries sorted by score descending, ties by athlete ID ascending,
        with ``rank`` 1..N

    Raises
    ------
    ValueError
        If period is unknown
    """
    start = resolve_period_start(period, now)
    type_filter = normalize_activity_type(activity_type)

    entries = [
        build_entry(
            athlete,
            filter_activities(activities_by_athlete.get(athlete.id, ()), start, type_filter),
        )
        for athlete in athletes
    ]

    entries.sort(key=lambda e: (-e.score, e.athlete_id))

    return [entry.model_copy(update={"rank": index + 1}) for index, entry in enumerate(entries)]


def split_top(
    entries: Sequence[LeaderboardEntry], top_n: int = TOP_N
) -> tuple[list[LeaderboardEntry], list[LeaderboardEntry]]:
    """Split ranked entries into the podium and everyone else."""
    return list(entries[:top_n]), list(entries[top_n:])


def locate_athlete_rank(
    entries: Sequence[LeaderboardEntry], athlete_id: int
) -> Optional[AthleteRank]:
    """Find one athlete in a ranked list; None when absent."""
    for entry in entries:
        if entry.athlete_id == athlete_id:
            return AthleteRank(
                athlete_id=athlete_id,
                rank=entry.rank,
                total_participants=len(entries),
                stats=RankStats(
                    total_km=entry.total_distance_km,
                    total_activities=entry.activity_count,
                    score=round(entry.score, 2),
                ),
            )
    return None


def top_performers(
    athletes: Iterable[AthleteRecord],
    activities_by_athlete: Mapping[int, Sequence[ActivityRecord]],
    now: datetime,
    limit: int = TOP_N,
) -> list[TopPerformer]:
    """Today's distance leaders with their podium badges.

    Only activities starting between local midnight and the next one count,
    and athletes with nothing logged today are left out. Ties go to the
    lower athlete ID.

    Parameters
    ----------
    athletes : Iterable[AthleteRecord]
        The club's athletes
    activities_by_athlete : Mapping[int, Sequence[ActivityRecord]]
        Activities keyed by athlete ID; may contain more than today
    now : datetime
        Naive local "now"
    limit : int
        How many performers to return

    Returns
    -------
    list[TopPerformer]
        At most ``limit`` performers, longest distance first
    """
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    day_end = day_start + timedelta(days=1)

    totals = []
    for athlete in athletes:
        today = [
            a
            for a in activities_by_athlete.get(athlete.id, ())
            if day_start <= a.start_date_local < day_end
        ]
        if today:
            totals.append((fsum(a.distance for a in today), len(today), athlete))

    totals.sort(key=lambda t: (-t[0], t[2].id))

    return [
        TopPerformer(
            athlete_id=athlete.id,
            name=athlete.display_name,
            avatar=athlete.profile_medium or athlete.profile or "",
            total_distance_km=round(distance / 1000, 2),
            activity_count=count,
            badge=PODIUM_BADGES[index] if index < len(PODIUM_BADGES) else "Participant",
        )
        for index, (distance, count, athlete) in enumerate(totals[:limit])
    ]
