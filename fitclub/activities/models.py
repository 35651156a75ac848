"""Activity database models."""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    String,
)
from sqlalchemy.dialects.postgresql import JSONB

from fitclub.core.database import Base


class Activity(Base):
    """Strava activity stored in database.

    Core fields used by stats, calendars and the leaderboard.
    Full Strava response stored in raw_data for extensibility.
    """

    __tablename__ = "activities"

    # Primary key - Strava's activity ID (upsert key)
    id = Column(BigInteger, primary_key=True)

    athlete_id = Column(BigInteger, nullable=False, index=True)

    # Core activity info
    name = Column(String, nullable=False, default="")
    type = Column(String, nullable=False, index=True)  # Run, Ride, Swim, etc.
    sport_type = Column(String, nullable=True)  # More specific than type
    workout_type = Column(
        Integer, nullable=True
    )  # 0=default, 1=race, 2=long run, 3=workout

    # Metrics
    distance = Column(Float, nullable=False, default=0)  # meters
    moving_time = Column(Integer, nullable=False, default=0)  # seconds
    elapsed_time = Column(Integer, nullable=False, default=0)  # seconds
    total_elevation_gain = Column(Float, nullable=False, default=0)  # meters

    # Speed metrics
    average_speed = Column(Float, nullable=True)  # m/s
    max_speed = Column(Float, nullable=True)  # m/s

    # Biometrics (only when the device recorded them)
    average_heartrate = Column(Float, nullable=True)
    max_heartrate = Column(Float, nullable=True)
    calories = Column(Float, nullable=True)  # kcal as reported by Strava

    # Dates
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)  # UTC
    start_date_local = Column(DateTime, nullable=False, index=True)  # Wall clock
    timezone = Column(String, nullable=True)

    # Social metrics
    kudos_count = Column(Integer, default=0)
    comment_count = Column(Integer, default=0)
    athlete_count = Column(Integer, default=1)

    # Flags
    manual = Column(Boolean, default=False)
    private = Column(Boolean, default=False)

    summary_polyline = Column(String, nullable=True)

    # Full Strava API response (for extensibility)
    raw_data = Column(JSON().with_variant(JSONB, "postgresql"), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<Activity(id={self.id}, name='{self.name}', type='{self.type}', distance={self.distance})>"
