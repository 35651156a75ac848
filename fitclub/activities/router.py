"""Activity endpoints for querying stored activities."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from fitclub.activities.service import activity_service
from fitclub.dependencies import get_session

router = APIRouter(prefix="/activities", tags=["activities"])


class ActivityResponse(BaseModel):
    """Activity response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    athlete_id: int
    name: str
    type: str
    sport_type: Optional[str] = None
    workout_type: Optional[int] = None
    distance: float
    moving_time: int
    elapsed_time: int
    total_elevation_gain: float
    average_speed: Optional[float] = None
    max_speed: Optional[float] = None
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    calories: Optional[float] = None
    start_date: datetime
    start_date_local: datetime
    timezone: Optional[str] = None
    kudos_count: Optional[int] = 0
    comment_count: Optional[int] = 0
    summary_polyline: Optional[str] = None


class ActivityTypesResponse(BaseModel):
    activity_types: list[str]


@router.get("/recent", response_model=list[ActivityResponse])
async def get_recent_activities(
    limit: int = Query(50, ge=1, le=200), db: AsyncSession = Depends(get_session)
):
    """Get recent activities across all athletes."""
    return await activity_service.get_recent_activities(db, limit=limit)


@router.get("/types", response_model=ActivityTypesResponse)
async def get_activity_types(db: AsyncSession = Depends(get_session)):
    """Distinct activity types, for the app's filter chips."""
    return ActivityTypesResponse(activity_types=await activity_service.get_activity_types(db))


@router.get("/athlete/{athlete_id}", response_model=list[ActivityResponse])
async def get_athlete_activities(
    athlete_id: int,
    type: Optional[str] = Query(None, description="Strava activity type, e.g. Run"),
    start_date: Optional[datetime] = Query(None, description="Local start, inclusive"),
    end_date: Optional[datetime] = Query(None, description="Local start, exclusive"),
    limit: int = Query(30, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_session),
):
    """Get activities for a specific athlete, newest first.

    Parameters
    ----------
    athlete_id : int
        Strava athlete ID
    type : str | None
        Only activities of this type
    start_date, end_date : datetime | None
        Bounds on the local start time
    limit : int
        Maximum number of activities to return (default: 30)
    offset : int
        Number of activities to skip (default: 0)
    """
    return await activity_service.get_athlete_activities(
        db,
        athlete_id=athlete_id,
        activity_type=type,
        after=start_date,
        before=end_date,
        limit=limit,
        offset=offset,
    )


@router.get("/{activity_id}", response_model=ActivityResponse)
async def get_activity(activity_id: int, db: AsyncSession = Depends(get_session)):
    """Get a specific activity by ID."""
    activity = await activity_service.get_activity(db, activity_id)
    if not activity:
        raise HTTPException(status_code=404, detail="Activity not found")
    return activity
