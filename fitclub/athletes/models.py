"""Athlete and provider stats snapshot models."""

import time
from datetime import datetime, timezone

from sqlalchemy import JSON, BigInteger, Boolean, Column, DateTime, Float, Integer, String

from fitclub.core.database import Base

# Totals buckets reported by Strava's /athletes/{id}/stats endpoint
TOTALS_FIELDS = (
    "recent_ride_totals",
    "recent_run_totals",
    "recent_swim_totals",
    "ytd_ride_totals",
    "ytd_run_totals",
    "ytd_swim_totals",
    "all_ride_totals",
    "all_run_totals",
    "all_swim_totals",
)


class Athlete(Base):
    """Club member connected through Strava OAuth.

    The primary key is the Strava athlete ID.
    """

    __tablename__ = "athletes"

    id = Column(BigInteger, primary_key=True)

    firstname = Column(String, nullable=True)
    lastname = Column(String, nullable=True)
    username = Column(String, nullable=True)
    profile = Column(String, nullable=True)  # Large (124x124)
    profile_medium = Column(String, nullable=True)  # Medium (62x62)

    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    country = Column(String, nullable=True)
    sex = Column(String, nullable=True)
    weight = Column(Float, nullable=True)  # kg, used by the calorie model
    premium = Column(Boolean, default=False)

    access_token = Column(String, nullable=False)
    refresh_token = Column(String, nullable=False)
    token_expires_at = Column(Integer, nullable=False)

    authorized = Column(Boolean, default=True)
    last_sync_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def is_token_expired(self) -> bool:
        return time.time() > self.token_expires_at

    @property
    def athlete_id(self) -> int:
        """Alias for id to match Strava terminology"""
        return self.id

    @property
    def full_name(self) -> str:
        return f"{self.firstname or ''} {self.lastname or ''}".strip()

    def __repr__(self):
        return f"<Athlete(id={self.id}, name='{self.full_name}')>"


class AthleteStats(Base):
    """Provider-reported lifetime / recent / YTD totals for one athlete.

    Sourced from Strava, not derived from local activities. Replaced wholesale
    on every sync.
    """

    __tablename__ = "athlete_stats"

    athlete_id = Column(BigInteger, primary_key=True)

    biggest_ride_distance = Column(Float, nullable=False, default=0)  # meters
    biggest_climb_elevation_gain = Column(Float, nullable=False, default=0)  # meters

    # Each holds {count, distance, moving_time, elapsed_time, elevation_gain, achievement_count}
    recent_ride_totals = Column(JSON, nullable=False, default=dict)
    recent_run_totals = Column(JSON, nullable=False, default=dict)
    recent_swim_totals = Column(JSON, nullable=False, default=dict)
    ytd_ride_totals = Column(JSON, nullable=False, default=dict)
    ytd_run_totals = Column(JSON, nullable=False, default=dict)
    ytd_swim_totals = Column(JSON, nullable=False, default=dict)
    all_ride_totals = Column(JSON, nullable=False, default=dict)
    all_run_totals = Column(JSON, nullable=False, default=dict)
    all_swim_totals = Column(JSON, nullable=False, default=dict)

    last_sync_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def _all_time(self, key: str) -> float:
        return sum(
            (totals or {}).get(key, 0)
            for totals in (self.all_ride_totals, self.all_run_totals, self.all_swim_totals)
        )

    @property
    def total_activities(self) -> int:
        return int(self._all_time("count"))

    @property
    def total_distance(self) -> float:
        return self._all_time("distance")

    @property
    def total_moving_time(self) -> int:
        return int(self._all_time("moving_time"))
