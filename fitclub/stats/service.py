"""Service layer for statistics and app screens.

Loads an athlete's activities, maps them to records and delegates to the
pure calculator, partitioner and formatter functions.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.activities.service import activity_service
from fitclub.athletes.models import Athlete
from fitclub.athletes.service import athlete_service
from fitclub.stats.calculator import get_week_boundaries, month_range, shift_month
from fitclub.stats.formatters import (
    athlete_card,
    calendar_info,
    history_view,
    month_view,
    profile_totals,
    recent_activities,
)
from fitclub.stats.periods import bucket_by_month, bucket_by_week
from fitclub.stats.schemas import (
    HistoryView,
    HomeView,
    MonthlyStatsResponse,
    MonthView,
    ProfileView,
    WeeklyStatsResponse,
)


class StatsService:
    """Service for per-athlete statistics."""

    async def _require_athlete(self, db: AsyncSession, athlete_id: int) -> Athlete:
        athlete = await athlete_service.get_athlete(db, athlete_id)
        if athlete is None:
            raise ValueError(f"Athlete {athlete_id} not found")
        return athlete

    async def get_weekly_stats(
        self,
        db: AsyncSession,
        athlete_id: int,
        weeks: int = 4,
        now: Optional[datetime] = None,
    ) -> WeeklyStatsResponse:
        """Stats for the last ``weeks`` Sunday-start weeks.

        Raises
        ------
        ValueError
            If athlete not found
        """
        await self._require_athlete(db, athlete_id)
        now = now or datetime.now()

        current_start, _ = get_week_boundaries(now)
        oldest_start = current_start - timedelta(weeks=weeks - 1)
        records = await activity_service.get_records(db, athlete_id, after=oldest_start)

        return WeeklyStatsResponse(
            athlete_id=athlete_id,
            weeks_requested=weeks,
            data=bucket_by_week(records, now, weeks),
        )

    async def get_monthly_stats(
        self,
        db: AsyncSession,
        athlete_id: int,
        months: int = 6,
        now: Optional[datetime] = None,
    ) -> MonthlyStatsResponse:
        """Stats for the last ``months`` calendar months.

        Raises
        ------
        ValueError
            If athlete not found
        """
        await self._require_athlete(db, athlete_id)
        now = now or datetime.now()

        oldest_start, _ = month_range(*shift_month(now.year, now.month, -(months - 1)))
        records = await activity_service.get_records(db, athlete_id, after=oldest_start)

        return MonthlyStatsResponse(
            athlete_id=athlete_id,
            months_requested=months,
            data=bucket_by_month(records, now, months),
        )

    async def get_history(
        self,
        db: AsyncSession,
        athlete_id: int,
        year: Optional[int] = None,
        activity_type: Optional[str] = None,
        limit: int = 100,
    ) -> HistoryView:
        await self._require_athlete(db, athlete_id)
        records = await activity_service.get_records(db, athlete_id)
        return history_view(records, year=year, activity_type=activity_type, limit=limit)

    async def get_home(
        self, db: AsyncSession, athlete_id: int, now: Optional[datetime] = None
    ) -> HomeView:
        """Home screen: profile card, today's date, lifetime totals, last 3 days."""
        athlete = await self._require_athlete(db, athlete_id)
        now = now or datetime.now()
        records = await activity_service.get_records(db, athlete_id)

        return HomeView(
            user=athlete_card(athlete),
            calendar=calendar_info(now),
            your_stats=profile_totals(records),
            recent_activities=recent_activities(records, now),
        )

    async def get_profile(self, db: AsyncSession, athlete_id: int) -> ProfileView:
        athlete = await self._require_athlete(db, athlete_id)
        records = await activity_service.get_records(db, athlete_id)
        return ProfileView(profile=athlete_card(athlete), stats=profile_totals(records))

    async def get_month_activities(
        self,
        db: AsyncSession,
        athlete_id: int,
        year: Optional[int] = None,
        month: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> MonthView:
        """Activities of one month; defaults to the current month."""
        await self._require_athlete(db, athlete_id)
        now = now or datetime.now()
        records = await activity_service.get_records(db, athlete_id)
        return month_view(records, year or now.year, month or now.month)


stats_service = StatsService()
