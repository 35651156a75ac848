"""Pydantic schemas for Strava API responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class AthleteSchema(BaseModel):
    """Athlete profile from Strava (``GET /athlete``)."""

    model_config = ConfigDict(extra="ignore")

    id: int
    username: Optional[str] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    profile: Optional[str] = None
    profile_medium: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    sex: Optional[str] = None
    weight: Optional[float] = None
    premium: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ActivitySchema(BaseModel):
    """Activity summary from Strava (``GET /athlete/activities``)."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str = ""
    distance: float = 0.0
    moving_time: int = 0
    elapsed_time: int = 0
    total_elevation_gain: float = 0.0
    type: str
    sport_type: Optional[str] = None
    start_date: datetime
    start_date_local: datetime
    timezone: Optional[str] = None
    athlete: dict[str, Any]
    kudos_count: Optional[int] = None
    comment_count: Optional[int] = None
    athlete_count: Optional[int] = None
    average_speed: Optional[float] = None
    max_speed: Optional[float] = None
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    calories: Optional[float] = None
    manual: Optional[bool] = None
    private: Optional[bool] = None
    map: Optional[dict[str, Any]] = None
    workout_type: Optional[int] = None  # 0=default, 1=race, 2=long run, 3=workout

    @property
    def athlete_id(self) -> int:
        return int(self.athlete["id"])

    @property
    def summary_polyline(self) -> Optional[str]:
        return (self.map or {}).get("summary_polyline") or None


class ActivityTotalsSchema(BaseModel):
    """One totals bucket of ``/athletes/{id}/stats``."""

    count: int = 0
    distance: float = 0.0
    moving_time: int = 0
    elapsed_time: int = 0
    elevation_gain: float = 0.0
    achievement_count: Optional[int] = 0


class AthleteStatsSchema(BaseModel):
    """Provider totals from ``GET /athletes/{id}/stats``."""

    biggest_ride_distance: Optional[float] = 0.0
    biggest_climb_elevation_gain: Optional[float] = 0.0
    recent_ride_totals: ActivityTotalsSchema = ActivityTotalsSchema()
    recent_run_totals: ActivityTotalsSchema = ActivityTotalsSchema()
    recent_swim_totals: ActivityTotalsSchema = ActivityTotalsSchema()
    ytd_ride_totals: ActivityTotalsSchema = ActivityTotalsSchema()
    ytd_run_totals: ActivityTotalsSchema = ActivityTotalsSchema()
    ytd_swim_totals: ActivityTotalsSchema = ActivityTotalsSchema()
    all_ride_totals: ActivityTotalsSchema = ActivityTotalsSchema()
    all_run_totals: ActivityTotalsSchema = ActivityTotalsSchema()
    all_swim_totals: ActivityTotalsSchema = ActivityTotalsSchema()


class RateLimitInfo(BaseModel):
    """Rate limit information from response headers."""

    short_usage: int  # 15-minute usage
    long_usage: int  # Daily usage
    short_limit: int  # 15-minute limit
    long_limit: int  # Daily limit
