"""API routes for starting and observing syncs."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fitclub.athletes.service import athlete_service
from fitclub.dependencies import (
    get_session,
    get_session_maker,
    get_sync_worker,
    verify_admin_api_key,
)
from fitclub.sync.models import SyncType
from fitclub.sync.service import sync_service
from fitclub.sync.worker import SyncWorker

router = APIRouter(prefix="/sync", tags=["sync"])


class SyncStarted(BaseModel):
    athlete_id: int
    sync_log_id: int
    sync_type: SyncType
    message: str


class SyncLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    athlete_id: int
    sync_type: str
    status: str
    activities_synced: int
    new_activities: int
    updated_activities: int
    error_message: Optional[str] = None
    started_at: datetime
    completed_at: Optional[datetime] = None


class SyncStatusResponse(BaseModel):
    athlete_id: int
    in_progress: bool
    last_sync_at: Optional[datetime] = None
    latest: Optional[SyncLogResponse] = None


@router.post(
    "/{athlete_id}",
    response_model=SyncStarted,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(verify_admin_api_key)],
)
async def start_sync(
    athlete_id: int,
    sync_type: SyncType = Query(SyncType.INCREMENTAL),
    db: AsyncSession = Depends(get_session),
    session_maker: async_sessionmaker = Depends(get_session_maker),
    worker: SyncWorker = Depends(get_sync_worker),
):
    """Start a background sync for an athlete.

    Answers immediately; poll ``/sync/{athlete_id}/status`` for the outcome.
    A request while a sync is running returns the running sync's log ID.

    Raises
    ------
    HTTPException
        404 if the athlete is not connected
    """
    if await athlete_service.get_athlete(db, athlete_id) is None:
        raise HTTPException(status_code=404, detail="Athlete not found")

    already_running = worker.in_flight(athlete_id) is not None
    sync_log_id = await worker.start(session_maker, athlete_id, sync_type)

    return SyncStarted(
        athlete_id=athlete_id,
        sync_log_id=sync_log_id,
        sync_type=sync_type,
        message="Sync already in progress" if already_running else "Sync started",
    )


@router.get("/{athlete_id}/status", response_model=SyncStatusResponse)
async def get_sync_status(
    athlete_id: int,
    db: AsyncSession = Depends(get_session),
    worker: SyncWorker = Depends(get_sync_worker),
):
    athlete = await athlete_service.get_athlete(db, athlete_id)
    if athlete is None:
        raise HTTPException(status_code=404, detail="Athlete not found")

    latest = await sync_service.get_latest_log(db, athlete_id)
    return SyncStatusResponse(
        athlete_id=athlete_id,
        in_progress=worker.in_flight(athlete_id) is not None,
        last_sync_at=athlete.last_sync_at,
        latest=SyncLogResponse.model_validate(latest) if latest else None,
    )


@router.get("/{athlete_id}/history", response_model=list[SyncLogResponse])
async def get_sync_history(
    athlete_id: int,
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_session),
):
    return await sync_service.get_history(db, athlete_id, limit=limit)
