"""Athlete endpoints: admin listing, profiles and provider stats."""

from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.activities.service import activity_service
from fitclub.athletes.service import athlete_service
from fitclub.dependencies import get_session, verify_admin_api_key
from fitclub.stats.calculator import compute_stats
from fitclub.stats.formatters import athlete_card
from fitclub.stats.schemas import AggregateStats, AthleteCard

router = APIRouter(prefix="/athletes", tags=["athletes"])


class AthleteSummary(BaseModel):
    """Admin view of a connected athlete."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    authorized: bool
    token_expires_at: int
    last_sync_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class AthleteDetail(BaseModel):
    athlete: AthleteCard
    stats: AggregateStats


class StatsSnapshotResponse(BaseModel):
    """Totals as reported by Strava, independent of stored activities."""

    model_config = ConfigDict(from_attributes=True)

    athlete_id: int
    biggest_ride_distance: float
    biggest_climb_elevation_gain: float
    recent_ride_totals: dict[str, Any]
    recent_run_totals: dict[str, Any]
    recent_swim_totals: dict[str, Any]
    ytd_ride_totals: dict[str, Any]
    ytd_run_totals: dict[str, Any]
    ytd_swim_totals: dict[str, Any]
    all_ride_totals: dict[str, Any]
    all_run_totals: dict[str, Any]
    all_swim_totals: dict[str, Any]
    total_activities: int
    total_distance: float
    total_moving_time: int
    last_sync_at: datetime


@router.get(
    "",
    response_model=list[AthleteSummary],
    dependencies=[Depends(verify_admin_api_key)],
)
async def list_athletes(db: AsyncSession = Depends(get_session)):
    """List all connected athletes (requires admin API key)"""
    return await athlete_service.list_athletes(db)


@router.get("/{athlete_id}", response_model=AthleteDetail)
async def get_athlete(athlete_id: int, db: AsyncSession = Depends(get_session)):
    """Profile plus stats computed from every stored activity."""
    athlete = await athlete_service.get_athlete(db, athlete_id)
    if athlete is None:
        raise HTTPException(status_code=404, detail="Athlete not found")

    records = await activity_service.get_records(db, athlete_id)
    return AthleteDetail(athlete=athlete_card(athlete), stats=compute_stats(records))


@router.get("/{athlete_id}/stats", response_model=StatsSnapshotResponse)
async def get_athlete_stats(athlete_id: int, db: AsyncSession = Depends(get_session)):
    """Latest Strava stats snapshot (refreshed on every sync)."""
    snapshot = await athlete_service.get_stats_snapshot(db, athlete_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Stats not synced yet")
    return StatsSnapshotResponse.model_validate(snapshot)
