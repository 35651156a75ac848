"""Sync log model: one row per sync attempt."""

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text

from fitclub.core.database import Base


class SyncType(str, Enum):
    FULL = "full"
    INCREMENTAL = "incremental"


class SyncStatus(str, Enum):
    """Status of a sync operation.

    STARTED is written when the sync begins; exactly one of COMPLETED or
    FAILED replaces it when the sync ends.
    """

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class SyncLog(Base):
    __tablename__ = "sync_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    athlete_id = Column(BigInteger, nullable=False, index=True)

    sync_type = Column(String(20), nullable=False, default=SyncType.INCREMENTAL.value)
    status = Column(String(20), nullable=False, default=SyncStatus.STARTED.value)

    activities_synced = Column(Integer, nullable=False, default=0)
    new_activities = Column(Integer, nullable=False, default=0)
    updated_activities = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)

    started_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None or self.started_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def __repr__(self):
        return f"<SyncLog(id={self.id}, athlete_id={self.athlete_id}, status='{self.status}')>"
