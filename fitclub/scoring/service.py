"""Service layer for leaderboard calculations."""

from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.activities.service import activity_service
from fitclub.athletes.service import athlete_service
from fitclub.scoring.calculator import (
    locate_athlete_rank,
    normalize_activity_type,
    period_label,
    rank_leaderboard,
    resolve_period_start,
    split_top,
    top_performers,
)
from fitclub.scoring.schemas import (
    AthleteRank,
    LeaderboardEntry,
    LeaderboardResponse,
    PeriodInfo,
    TopPerformersResponse,
)


class ScoringService:
    """Service for ranking the club's athletes."""

    async def get_ranked_entries(
        self,
        db: AsyncSession,
        period: str = "week",
        activity_type: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[LeaderboardEntry]:
        """Rank every athlete for a period.

        Parameters
        ----------
        db : AsyncSession
            Database session
        period : str
            'week', '7days', 'month', '30days' or 'all'
        activity_type : str | None
            Type filter; None or 'all' for every type
        now : datetime | None
            Naive local "now"; defaults to the current time

        Returns
        -------
        list[LeaderboardEntry]
            All athletes, ranked 1..N

        Raises
        ------
        ValueError
            If period is unknown
        """
        now = now or datetime.now()
        start = resolve_period_start(period, now)

        athletes = await athlete_service.list_athlete_records(db)
        activities_by_athlete = await activity_service.get_records_by_athlete(db, after=start)

        return rank_leaderboard(athletes, activities_by_athlete, period, activity_type, now)

    async def get_leaderboard(
        self,
        db: AsyncSession,
        period: str = "week",
        activity_type: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaderboardResponse:
        """Leaderboard split into the top performers and everyone else.

        Raises
        ------
        ValueError
            If period is unknown
        """
        now = now or datetime.now()
        entries = await self.get_ranked_entries(db, period, activity_type, now)
        top, others = split_top(entries)

        return LeaderboardResponse(
            period=PeriodInfo(
                type=period,
                label=period_label(period),
                start_date=resolve_period_start(period, now),
                end_date=now,
            ),
            activity_type=normalize_activity_type(activity_type) or "all",
            total_participants=len(entries),
            top3=top,
            others=others,
        )

    async def get_athlete_rank(
        self,
        db: AsyncSession,
        athlete_id: int,
        period: str = "week",
        activity_type: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[AthleteRank]:
        """One athlete's position in the full leaderboard.

        Returns
        -------
        AthleteRank | None
            None if the athlete is not part of the club

        Raises
        ------
        ValueError
            If period is unknown
        """
        entries = await self.get_ranked_entries(db, period, activity_type, now)
        rank = locate_athlete_rank(entries, athlete_id)
        if rank is None:
            return None
        return rank.model_copy(update={"period": period})

    async def get_top_performers(
        self, db: AsyncSession, now: Optional[datetime] = None
    ) -> TopPerformersResponse:
        """Today's top three athletes by distance."""
        now = now or datetime.now()
        day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)

        athletes = await athlete_service.list_athlete_records(db)
        activities_by_athlete = await activity_service.get_records_by_athlete(db, after=day_start)

        return TopPerformersResponse(
            date=day_start.date(),
            performers=top_performers(athletes, activities_by_athlete, now),
        )


# Singleton instance
scoring_service = ScoringService()
