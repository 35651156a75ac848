"""Pydantic schemas for leaderboard API responses."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class LeaderboardEntry(BaseModel):
    """Single entry in the leaderboard.

    Attributes
    ----------
    athlete_id : int
        Strava athlete ID
    display_name : str
        "firstname lastname", "User" when the first name is unknown
    total_distance_km : float
        Distance in kilometers (2 decimals)
    total_time_minutes : int
        Moving time in minutes (rounded)
    total_elevation_gain_meters : int
        Climbing in meters (rounded)
    calories_burned : int
        Estimated with the calorie model, not provider calories
    activity_count : int
        Activities in the window
    workout_days : int
        Distinct local dates with at least one activity
    last_activity_date : datetime | None
        Local start of the latest activity in the window
    score : float
        ``km + 2 * activities + hours``
    rank : int
        1-based position; 0 until ranked
    """

    athlete_id: int
    display_name: str
    profile: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    total_distance_km: float
    total_time_minutes: int
    total_elevation_gain_meters: int
    calories_burned: int
    activity_count: int
    workout_days: int
    last_activity_date: Optional[datetime] = None
    score: float
    rank: int = 0


class PeriodInfo(BaseModel):
    type: str
    label: str
    start_date: Optional[datetime] = None
    end_date: datetime


class LeaderboardResponse(BaseModel):
    """Leaderboard split into the podium and the rest."""

    period: PeriodInfo
    activity_type: str
    total_participants: int
    top3: list[LeaderboardEntry]
    others: list[LeaderboardEntry]


class RankStats(BaseModel):
    total_km: float
    total_activities: int
    score: float


class AthleteRank(BaseModel):
    """One athlete's position in a leaderboard."""

    athlete_id: int
    rank: int
    total_participants: int
    period: Optional[str] = None
    stats: RankStats


class TopPerformer(BaseModel):
    """One of the day's distance leaders."""

    athlete_id: int
    name: str
    avatar: str
    total_distance_km: float
    activity_count: int
    badge: str


class TopPerformersResponse(BaseModel):
    date: date
    performers: list[TopPerformer]
