"""API endpoints for statistics and the mobile app screens."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.dependencies import get_session
from fitclub.stats.schemas import (
    HistoryView,
    HomeView,
    MonthlyStatsResponse,
    MonthView,
    ProfileView,
    WeeklyStatsResponse,
)
from fitclub.stats.service import stats_service

router = APIRouter(prefix="/stats", tags=["stats"])

app_router = APIRouter(prefix="/app", tags=["app"])


@router.get("/{athlete_id}/weekly", response_model=WeeklyStatsResponse)
async def get_weekly_stats(
    athlete_id: int,
    weeks: int = Query(4, ge=1, le=52, description="Number of weeks, current week first"),
    db: AsyncSession = Depends(get_session),
):
    """Stats per Sunday-start week.

    Raises
    ------
    HTTPException
        404 if athlete not found
    """
    try:
        return await stats_service.get_weekly_stats(db, athlete_id, weeks=weeks)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{athlete_id}/monthly", response_model=MonthlyStatsResponse)
async def get_monthly_stats(
    athlete_id: int,
    months: int = Query(6, ge=1, le=24, description="Number of months, current month first"),
    db: AsyncSession = Depends(get_session),
):
    """Stats per calendar month.

    Raises
    ------
    HTTPException
        404 if athlete not found
    """
    try:
        return await stats_service.get_monthly_stats(db, athlete_id, months=months)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/{athlete_id}/history", response_model=HistoryView)
async def get_history(
    athlete_id: int,
    year: Optional[int] = Query(None, ge=2000, le=2100),
    type: Optional[str] = Query(None, description="Strava activity type, e.g. Run"),
    limit: int = Query(100, ge=1, le=1000),
    db: AsyncSession = Depends(get_session),
):
    """Activity history with overall and per-type stats."""
    try:
        return await stats_service.get_history(
            db, athlete_id, year=year, activity_type=type, limit=limit
        )
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app_router.get("/home/{athlete_id}", response_model=HomeView)
async def get_home(athlete_id: int, db: AsyncSession = Depends(get_session)):
    try:
        return await stats_service.get_home(db, athlete_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app_router.get("/profile/{athlete_id}", response_model=ProfileView)
async def get_profile(athlete_id: int, db: AsyncSession = Depends(get_session)):
    try:
        return await stats_service.get_profile(db, athlete_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app_router.get("/activities/{athlete_id}", response_model=MonthView)
async def get_month_activities(
    athlete_id: int,
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    db: AsyncSession = Depends(get_session),
):
    """Activities of one calendar month (default: current month)."""
    try:
        return await stats_service.get_month_activities(db, athlete_id, year=year, month=month)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
