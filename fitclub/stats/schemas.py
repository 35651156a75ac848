"""Pydantic schemas for statistics.

``ActivityRecord`` and ``AthleteRecord`` are the normalized shapes the pure
stats / ranking functions work on. They are built from ORM rows with
``model_validate`` (``from_attributes``) at the store boundary, so the
calculators never deal with missing columns or timezone-aware local times.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ActivityRecord(BaseModel):
    """Normalized, immutable activity as consumed by the calculators.

    Attributes
    ----------
    id : int
        Strava activity ID
    athlete_id : int
        Owner's Strava athlete ID
    type : str
        Provider activity type (Run, Walk, Ride, ...)
    distance : float
        Meters
    moving_time, elapsed_time : int
        Seconds
    total_elevation_gain : float
        Meters
    start_date_local : datetime
        Naive wall-clock time of the athlete; all calendar logic uses it
    average_heartrate, max_heartrate, calories : float | None
        Only present when the device recorded them
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    athlete_id: int
    name: str = ""
    type: str
    sport_type: Optional[str] = None
    distance: float = 0.0
    moving_time: int = 0
    elapsed_time: int = 0
    total_elevation_gain: float = 0.0
    average_speed: Optional[float] = None
    max_speed: Optional[float] = None
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    calories: Optional[float] = None
    start_date: Optional[datetime] = None
    start_date_local: datetime
    kudos_count: int = 0
    summary_polyline: Optional[str] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_default(cls, value):
        return value or ""

    @field_validator(
        "distance", "moving_time", "elapsed_time", "total_elevation_gain", "kudos_count",
        mode="before",
    )
    @classmethod
    def _zero_if_missing(cls, value):
        return 0 if value is None else value

    @field_validator("start_date_local")
    @classmethod
    def _drop_tzinfo(cls, value: datetime) -> datetime:
        # Strava sends local time with a "Z" suffix; it is wall-clock, not UTC
        return value.replace(tzinfo=None)

    @property
    def has_map(self) -> bool:
        return bool(self.summary_polyline)


class AthleteRecord(BaseModel):
    """Normalized athlete profile used by the leaderboard."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    profile: Optional[str] = None
    profile_medium: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    weight: Optional[float] = None
    created_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.firstname or 'User'} {self.lastname or ''}".strip()


class TypeTotals(BaseModel):
    """Subtotals for one activity type."""

    count: int = 0
    distance: float = 0.0
    moving_time: int = 0
    elevation_gain: float = 0.0


class AggregateStats(BaseModel):
    """Totals computed from a set of activities.

    Heart-rate fields are None when no activity in the set reported heart
    rate; every other numeric field is zero for an empty set.
    """

    total_activities: int = 0
    total_distance: int = 0
    total_distance_km: float = 0.0
    total_distance_miles: float = 0.0
    total_moving_time: int = 0
    total_moving_time_formatted: str = "0h 0m"
    total_elapsed_time: int = 0
    total_elevation_gain: int = 0
    total_calories: int = 0
    average_speed: float = 0.0
    max_speed: float = 0.0
    average_heartrate: Optional[int] = None
    max_heartrate: Optional[int] = None
    by_type: dict[str, TypeTotals] = {}


class ActivitySummary(BaseModel):
    """Per-activity shape used inside buckets and history."""

    id: int
    name: str
    type: str
    sport_type: Optional[str] = None
    date: datetime
    distance: float
    distance_km: float
    moving_time: int
    moving_time_formatted: str
    elapsed_time: int
    elevation_gain: float
    average_speed: Optional[float] = None
    max_speed: Optional[float] = None
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    calories: Optional[float] = None
    kudos_count: int = 0
    has_map: bool = False


class WeekBucket(BaseModel):
    """One Sunday-to-Saturday week.

    ``week_end`` is exclusive (the following Sunday).
    """

    week_start: str
    week_end: str
    week_number: int
    stats: AggregateStats
    activities: list[ActivitySummary]


class MonthBucket(BaseModel):
    """One calendar month. ``month_end`` is the last day of the month."""

    month: str
    year: int
    month_start: str
    month_end: str
    stats: AggregateStats
    activities: list[ActivitySummary]


class WeeklyStatsResponse(BaseModel):
    athlete_id: int
    weeks_requested: int
    data: list[WeekBucket]


class MonthlyStatsResponse(BaseModel):
    athlete_id: int
    months_requested: int
    data: list[MonthBucket]


# =========================================================================
# Screen shapes (home, profile, activities, history)
# =========================================================================


class DurationInfo(BaseModel):
    hours: int = 0
    minutes: int = 0
    total_minutes: int = 0
    formatted: str = "0h 0m"


class DistanceInfo(BaseModel):
    km: float = 0.0
    meters: int = 0
    formatted: str = "0.00 km"


class ProfileTotals(BaseModel):
    """Headline totals; distance counts only runs and walks."""

    total_activities: int
    total_km: float
    total_km_formatted: str
    total_hours: int
    total_minutes: int
    total_time_formatted: str


class ActivityListItem(BaseModel):
    """Activity as listed on the mobile screens."""

    id: int
    name: str
    category: str
    type: str
    sport_type: Optional[str] = None
    date: str
    day: int
    day_name: str
    time: str
    display_date_time: str
    distance_km: float
    distance_formatted: str
    duration: DurationInfo
    elevation_gain: float
    calories: float
    average_speed: float
    max_speed: float
    has_map: bool


class RecentActivities(BaseModel):
    count: int
    period: str
    activities: list[ActivityListItem]


class CalendarInfo(BaseModel):
    date: int
    day: str
    month: str
    year: int
    formatted: str


class MonthFilter(BaseModel):
    month: int
    month_name: str
    year: int
    formatted: str


class MonthSummary(BaseModel):
    total_activities: int
    total_km: float
    total_km_formatted: str
    total_time: str


class MonthView(BaseModel):
    filter: MonthFilter
    summary: MonthSummary
    available_months: list[str]
    activities: list[ActivityListItem]


class HistoryFilters(BaseModel):
    year: Optional[int] = None
    type: Optional[str] = None
    limit: int


class HistoryView(BaseModel):
    filters: HistoryFilters
    summary: AggregateStats
    type_breakdown: dict[str, AggregateStats]
    total_activities: int
    activities: list[ActivitySummary]


class AthleteCard(BaseModel):
    id: int
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    full_name: str
    profile: Optional[str] = None
    profile_medium: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    sex: Optional[str] = None
    premium: Optional[bool] = None
    joined_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class HomeView(BaseModel):
    user: AthleteCard
    calendar: CalendarInfo
    your_stats: ProfileTotals
    recent_activities: RecentActivities


class ProfileView(BaseModel):
    profile: AthleteCard
    stats: ProfileTotals
