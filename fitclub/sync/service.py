"""Sync service: pull an athlete's Strava data into the store."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.activities.service import activity_service
from fitclub.athletes.service import athlete_service
from fitclub.config import get_settings
from fitclub.strava.service import strava_service
from fitclub.sync.models import SyncLog, SyncStatus, SyncType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Counts of one finished sync."""

    athlete_id: int
    new_activities: int
    updated_activities: int

    @property
    def activities_synced(self) -> int:
        return self.new_activities + self.updated_activities


def _epoch(value: datetime) -> int:
    # SQLite hands back naive datetimes for timezone-aware columns
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class SyncService:
    """Service for syncing activities, profile and stats from Strava."""

    async def sync_athlete(
        self,
        db: AsyncSession,
        athlete_id: int,
        sync_type: SyncType = SyncType.INCREMENTAL,
    ) -> SyncResult:
        """Fetch and store an athlete's activities, profile and stats snapshot.

        Parameters
        ----------
        db : AsyncSession
            Database session
        athlete_id : int
            Strava athlete ID
        sync_type : SyncType
            FULL fetches the whole history; INCREMENTAL only activities after
            the latest stored one

        Returns
        -------
        SyncResult
            Created / updated activity counts

        Raises
        ------
        ValueError
            If the athlete is not connected
        StravaException
            On any Strava API error; nothing is retried
        """
        athlete = await athlete_service.get_athlete(db, athlete_id)
        if athlete is None:
            raise ValueError(f"Athlete {athlete_id} not found")

        client = await strava_service.get_client_for_athlete(db, athlete_id, priority="sync")

        after = None
        if sync_type == SyncType.INCREMENTAL:
            latest = await activity_service.get_latest_start(db, athlete_id)
            after = _epoch(latest) if latest is not None else None

        logger.info(f"Starting {sync_type.value} sync for athlete {athlete_id} (after={after})")

        profile = await client.get_athlete()
        athlete = await athlete_service.update_profile(db, athlete, profile)

        activities = await client.get_all_activities(
            after=after, per_page=get_settings().SYNC_PAGE_SIZE
        )

        # Paging a long history takes a while; the athlete may have disconnected meanwhile
        if await athlete_service.get_athlete(db, athlete_id) is None:
            raise ValueError(f"Athlete {athlete_id} disconnected during sync")

        created, updated = await activity_service.upsert_activities(db, activities)

        stats = await client.get_athlete_stats(athlete_id)
        await athlete_service.save_stats_snapshot(db, athlete_id, stats)

        await athlete_service.mark_synced(db, athlete)

        logger.info(
            f"Sync completed for athlete {athlete_id}: {created} created, {updated} updated"
        )
        return SyncResult(
            athlete_id=athlete_id, new_activities=created, updated_activities=updated
        )

    # =========================================================================
    # Sync log
    # =========================================================================

    async def start_log(
        self, db: AsyncSession, athlete_id: int, sync_type: SyncType
    ) -> SyncLog:
        sync_log = SyncLog(
            athlete_id=athlete_id,
            sync_type=sync_type.value,
            status=SyncStatus.STARTED.value,
        )
        db.add(sync_log)
        await db.commit()
        await db.refresh(sync_log)
        return sync_log

    async def complete_log(
        self, db: AsyncSession, log_id: int, result: SyncResult
    ) -> Optional[SyncLog]:
        sync_log = await self._get_log(db, log_id)
        if sync_log is None:
            return None
        sync_log.status = SyncStatus.COMPLETED.value
        sync_log.activities_synced = result.activities_synced
        sync_log.new_activities = result.new_activities
        sync_log.updated_activities = result.updated_activities
        sync_log.completed_at = datetime.now(timezone.utc)
        await db.commit()
        return sync_log

    async def fail_log(
        self, db: AsyncSession, log_id: int, error_message: str
    ) -> Optional[SyncLog]:
        sync_log = await self._get_log(db, log_id)
        if sync_log is None:
            return None
        sync_log.status = SyncStatus.FAILED.value
        sync_log.error_message = error_message
        sync_log.completed_at = datetime.now(timezone.utc)
        await db.commit()
        return sync_log

    async def _get_log(self, db: AsyncSession, log_id: int) -> Optional[SyncLog]:
        sync_log = await db.get(SyncLog, log_id)
        if sync_log is None:
            # Removed together with its athlete on disconnect
            logger.warning(f"Sync log {log_id} no longer exists, outcome not recorded")
        return sync_log

    async def has_running_sync(self, db: AsyncSession, athlete_id: int) -> bool:
        """Whether the athlete's latest sync log is still open."""
        latest = await self.get_latest_log(db, athlete_id)
        return latest is not None and latest.status == SyncStatus.STARTED.value

    async def get_latest_log(self, db: AsyncSession, athlete_id: int) -> Optional[SyncLog]:
        result = await db.execute(
            select(SyncLog)
            .filter(SyncLog.athlete_id == athlete_id)
            .order_by(SyncLog.started_at.desc(), SyncLog.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_history(
        self, db: AsyncSession, athlete_id: int, limit: int = 20
    ) -> list[SyncLog]:
        result = await db.execute(
            select(SyncLog)
            .filter(SyncLog.athlete_id == athlete_id)
            .order_by(SyncLog.started_at.desc(), SyncLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


sync_service = SyncService()
