"""API endpoints for the leaderboard."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.dependencies import get_session
from fitclub.scoring.schemas import AthleteRank, LeaderboardResponse, TopPerformersResponse
from fitclub.scoring.service import scoring_service

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])

PERIOD_DESCRIPTION = "Period: week (or 7days), month (or 30days), all"
TYPE_DESCRIPTION = "Activity type filter, e.g. Run or 'Cycle Ride'; 'all' for every type"


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(
    period: str = Query("week", description=PERIOD_DESCRIPTION),
    activity_type: Optional[str] = Query(None, description=TYPE_DESCRIPTION),
    db: AsyncSession = Depends(get_session),
):
    """Rank every club athlete for a period.

    Score is ``km + 2 * activities + hours``; ties go to the lower athlete ID.

    Parameters
    ----------
    period : str
        Time period to rank
    activity_type : str | None
        Only count activities of this type
    db : AsyncSession
        Database session (injected)

    Returns
    -------
    LeaderboardResponse
        Period info, participant count, top performers and the rest

    Raises
    ------
    HTTPException
        400 if period is invalid
    """
    try:
        return await scoring_service.get_leaderboard(db, period, activity_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/top-performers", response_model=TopPerformersResponse)
async def get_top_performers(db: AsyncSession = Depends(get_session)):
    """Today's three longest-distance athletes, badged for the home screen."""
    return await scoring_service.get_top_performers(db)


@router.get("/{athlete_id}/rank", response_model=AthleteRank)
async def get_athlete_rank(
    athlete_id: int,
    period: str = Query("week", description=PERIOD_DESCRIPTION),
    activity_type: Optional[str] = Query(None, description=TYPE_DESCRIPTION),
    db: AsyncSession = Depends(get_session),
):
    """Get one athlete's rank among all club athletes.

    Raises
    ------
    HTTPException
        400 if period is invalid
        404 if athlete not found
    """
    try:
        rank = await scoring_service.get_athlete_rank(db, athlete_id, period, activity_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if rank is None:
        raise HTTPException(status_code=404, detail="Athlete not found")
    return rank
