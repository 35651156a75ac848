"""Activity service: upserts from Strava and queries for the API and stats."""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from itertools import groupby
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.activities.models import Activity
from fitclub.stats.schemas import ActivityRecord
from fitclub.strava.schemas import ActivitySchema

logger = logging.getLogger(__name__)

# Returned when no activity has been synced yet
DEFAULT_ACTIVITY_TYPES = [
    "Hike",
    "Ride",
    "Run",
    "Swim",
    "Walk",
    "WeightTraining",
    "Workout",
    "Yoga",
]


def to_records(activities: Sequence[Activity]) -> list[ActivityRecord]:
    """Map ORM rows to the normalized records the calculators consume."""
    return [ActivityRecord.model_validate(activity) for activity in activities]


class ActivityService:
    """Service for managing activities in the database."""

    async def get_activity(
        self, db: AsyncSession, activity_id: int
    ) -> Optional[Activity]:
        """Get activity by ID.

        Parameters
        ----------
        db : AsyncSession
            Database session
        activity_id : int
            Strava activity ID

        Returns
        -------
        Activity | None
            Activity if found, None otherwise
        """
        result = await db.execute(select(Activity).filter(Activity.id == activity_id))
        return result.scalar_one_or_none()

    async def upsert_activities(
        self, db: AsyncSession, activities: Sequence[ActivitySchema]
    ) -> tuple[int, int]:
        """Insert new activities and overwrite known ones, keyed by Strava ID.

        Parameters
        ----------
        db : AsyncSession
            Database session
        activities : Sequence[ActivitySchema]
            Activities from the Strava API

        Returns
        -------
        tuple[int, int]
            (created, updated) counts
        """
        if not activities:
            return 0, 0

        ids = [a.id for a in activities]
        result = await db.execute(select(Activity).filter(Activity.id.in_(ids)))
        existing = {activity.id: activity for activity in result.scalars().all()}

        created = updated = 0
        for data in activities:
            activity = existing.get(data.id)
            if activity is None:
                activity = Activity(id=data.id)
                db.add(activity)
                existing[data.id] = activity
                created += 1
            else:
                activity.updated_at = datetime.now(timezone.utc)
                updated += 1
            self._apply(activity, data)

        try:
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Upserted {len(activities)} activities ({created} new, {updated} updated)")
        return created, updated

    @staticmethod
    def _apply(activity: Activity, data: ActivitySchema) -> None:
        activity.athlete_id = data.athlete_id
        activity.name = data.name or ""
        activity.type = data.type
        activity.sport_type = data.sport_type
        activity.workout_type = data.workout_type
        activity.distance = data.distance
        activity.moving_time = data.moving_time
        activity.elapsed_time = data.elapsed_time
        activity.total_elevation_gain = data.total_elevation_gain
        activity.average_speed = data.average_speed
        activity.max_speed = data.max_speed
        activity.average_heartrate = data.average_heartrate
        activity.max_heartrate = data.max_heartrate
        activity.calories = data.calories
        activity.start_date = data.start_date
        # Strava marks local time with "Z"; store it as naive wall clock
        activity.start_date_local = data.start_date_local.replace(tzinfo=None)
        activity.timezone = data.timezone
        activity.kudos_count = data.kudos_count or 0
        activity.comment_count = data.comment_count or 0
        activity.athlete_count = data.athlete_count or 1
        activity.manual = bool(data.manual)
        activity.private = bool(data.private)
        activity.summary_polyline = data.summary_polyline
        # Store full response for future use
        activity.raw_data = data.model_dump(mode="json")

    async def get_athlete_activities(
        self,
        db: AsyncSession,
        athlete_id: int,
        activity_type: Optional[str] = None,
        after: Optional[datetime] = None,
        before: Optional[datetime] = None,
        limit: Optional[int] = 30,
        offset: int = 0,
    ) -> list[Activity]:
        """Get an athlete's activities, newest first.

        Parameters
        ----------
        db : AsyncSession
            Database session
        athlete_id : int
            Athlete ID
        activity_type : str, optional
            Only this Strava type
        after, before : datetime, optional
            Bounds on local start time (inclusive / exclusive)
        limit : int | None
            Max number of activities to return; None for all
        offset : int
            Number of activities to skip

        Returns
        -------
        list[Activity]
            List of activities
        """
        query = select(Activity).filter(Activity.athlete_id == athlete_id)
        if activity_type:
            query = query.filter(Activity.type == activity_type)
        if after is not None:
            query = query.filter(Activity.start_date_local >= after)
        if before is not None:
            query = query.filter(Activity.start_date_local < before)

        query = query.order_by(Activity.start_date_local.desc(), Activity.id.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)

        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_recent_activities(
        self, db: AsyncSession, limit: int = 50
    ) -> list[Activity]:
        """Get recent activities across all athletes."""
        result = await db.execute(
            select(Activity).order_by(Activity.start_date.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def get_activity_types(self, db: AsyncSession) -> list[str]:
        """Distinct activity types in the store, or a default list when empty."""
        result = await db.execute(select(Activity.type).distinct())
        types = sorted({t.strip() for t in result.scalars().all() if t and t.strip()})
        return types or list(DEFAULT_ACTIVITY_TYPES)

    async def get_records(
        self, db: AsyncSession, athlete_id: int, after: Optional[datetime] = None
    ) -> list[ActivityRecord]:
        """All of an athlete's activities as records."""
        activities = await self.get_athlete_activities(db, athlete_id, after=after, limit=None)
        return to_records(activities)

    async def get_records_by_athlete(
        self, db: AsyncSession, after: Optional[datetime] = None
    ) -> dict[int, list[ActivityRecord]]:
        """Activities of every athlete, grouped by athlete ID.

        Parameters
        ----------
        db : AsyncSession
            Database session
        after : datetime, optional
            Inclusive lower bound on local start time

        Returns
        -------
        dict[int, list[ActivityRecord]]
            Records keyed by athlete ID; athletes without activities are absent
        """
        query = select(Activity)
        if after is not None:
            query = query.filter(Activity.start_date_local >= after)
        result = await db.execute(
            query.order_by(Activity.athlete_id, Activity.start_date_local)
        )
        activities = list(result.scalars().all())

        return {
            athlete_id: to_records(list(group))
            for athlete_id, group in groupby(activities, key=lambda a: a.athlete_id)
        }

    async def get_latest_start(self, db: AsyncSession, athlete_id: int) -> Optional[datetime]:
        """UTC start of the athlete's most recent stored activity."""
        result = await db.execute(
            select(Activity.start_date)
            .filter(Activity.athlete_id == athlete_id)
            .order_by(Activity.start_date.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()


activity_service = ActivityService()
