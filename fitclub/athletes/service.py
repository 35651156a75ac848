"""Athlete service for profile, token and stats snapshot persistence."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.activities.models import Activity
from fitclub.athletes.models import TOTALS_FIELDS, Athlete, AthleteStats
from fitclub.stats.schemas import AthleteRecord
from fitclub.strava.schemas import AthleteSchema, AthleteStatsSchema
from fitclub.sync.models import SyncLog

logger = logging.getLogger(__name__)

# Profile fields copied from Strava on connect and on every sync
PROFILE_FIELDS = (
    "username",
    "firstname",
    "lastname",
    "profile",
    "profile_medium",
    "city",
    "state",
    "country",
    "sex",
    "premium",
)


class AthleteService:
    """Service for managing athletes in the database."""

    async def get_athlete(self, db: AsyncSession, athlete_id: int) -> Optional[Athlete]:
        result = await db.execute(select(Athlete).filter(Athlete.id == athlete_id))
        return result.scalar_one_or_none()

    async def list_athletes(self, db: AsyncSession, authorized_only: bool = False) -> list[Athlete]:
        query = select(Athlete).order_by(Athlete.id)
        if authorized_only:
            query = query.filter(Athlete.authorized)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_athlete_records(self, db: AsyncSession) -> list[AthleteRecord]:
        """Every athlete, mapped to the shape the leaderboard ranks."""
        return [AthleteRecord.model_validate(a) for a in await self.list_athletes(db)]

    async def upsert_athlete(
        self,
        db: AsyncSession,
        profile: AthleteSchema,
        access_token: str,
        refresh_token: str,
        expires_at: int,
    ) -> tuple[Athlete, bool]:
        """Create or update an athlete after an OAuth code exchange.

        Parameters
        ----------
        db : AsyncSession
            Database session
        profile : AthleteSchema
            Profile returned by ``GET /athlete``
        access_token, refresh_token : str
            Tokens from the exchange
        expires_at : int
            Access token expiry (epoch seconds)

        Returns
        -------
        tuple[Athlete, bool]
            The stored athlete and whether it was created
        """
        athlete = await self.get_athlete(db, profile.id)
        created = athlete is None
        if created:
            athlete = Athlete(id=profile.id)
            db.add(athlete)

        self._apply_profile(athlete, profile)
        athlete.access_token = access_token
        athlete.refresh_token = refresh_token
        athlete.token_expires_at = expires_at
        athlete.authorized = True

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await db.refresh(athlete)

        logger.info(f"{'Created' if created else 'Updated'} athlete {athlete.id}: {athlete.full_name}")
        return athlete, created

    async def update_profile(
        self, db: AsyncSession, athlete: Athlete, profile: AthleteSchema
    ) -> Athlete:
        """Refresh the stored profile from Strava, keeping a known weight."""
        self._apply_profile(athlete, profile)
        await db.commit()
        await db.refresh(athlete)
        return athlete

    async def update_tokens(
        self,
        db: AsyncSession,
        athlete: Athlete,
        access_token: str,
        refresh_token: str,
        expires_at: int,
    ) -> Athlete:
        try:
            athlete.access_token = access_token
            athlete.refresh_token = refresh_token
            athlete.token_expires_at = expires_at
            await db.commit()
            await db.refresh(athlete)
            return athlete
        except Exception:
            await db.rollback()
            raise

    async def mark_synced(self, db: AsyncSession, athlete: Athlete) -> None:
        athlete.last_sync_at = datetime.now(timezone.utc)
        await db.commit()

    async def save_stats_snapshot(
        self, db: AsyncSession, athlete_id: int, stats: AthleteStatsSchema
    ) -> AthleteStats:
        """Replace the provider stats snapshot for an athlete."""
        snapshot = await self.get_stats_snapshot(db, athlete_id)
        if snapshot is None:
            snapshot = AthleteStats(athlete_id=athlete_id)
            db.add(snapshot)

        snapshot.biggest_ride_distance = stats.biggest_ride_distance or 0
        snapshot.biggest_climb_elevation_gain = stats.biggest_climb_elevation_gain or 0
        for field in TOTALS_FIELDS:
            setattr(snapshot, field, getattr(stats, field).model_dump())
        snapshot.last_sync_at = datetime.now(timezone.utc)

        await db.commit()
        await db.refresh(snapshot)
        return snapshot

    async def get_stats_snapshot(
        self, db: AsyncSession, athlete_id: int
    ) -> Optional[AthleteStats]:
        result = await db.execute(
            select(AthleteStats).filter(AthleteStats.athlete_id == athlete_id)
        )
        return result.scalar_one_or_none()

    async def delete_athlete(self, db: AsyncSession, athlete_id: int) -> Optional[Athlete]:
        """Delete an athlete with their activities, stats snapshot and sync logs.

        Returns
        -------
        Athlete | None
            The deleted athlete, or None if not found
        """
        athlete = await self.get_athlete(db, athlete_id)
        if athlete is None:
            return None

        try:
            await db.execute(delete(Activity).where(Activity.athlete_id == athlete_id))
            await db.execute(delete(AthleteStats).where(AthleteStats.athlete_id == athlete_id))
            await db.execute(delete(SyncLog).where(SyncLog.athlete_id == athlete_id))
            await db.delete(athlete)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Deleted athlete {athlete_id} and all related data")
        return athlete

    @staticmethod
    def _apply_profile(athlete: Athlete, profile: AthleteSchema) -> None:
        for field in PROFILE_FIELDS:
            setattr(athlete, field, getattr(profile, field))
        if profile.weight:
            athlete.weight = profile.weight


athlete_service = AthleteService()
