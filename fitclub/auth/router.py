from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fitclub.athletes.service import athlete_service
from fitclub.auth.service import auth_service
from fitclub.dependencies import (
    get_session,
    get_session_maker,
    get_sync_worker,
    verify_admin_api_key,
)
from fitclub.stats.formatters import athlete_card
from fitclub.stats.schemas import AthleteCard
from fitclub.strava.client import AsyncStravaClient
from fitclub.sync.models import SyncType
from fitclub.sync.worker import SyncWorker

router = APIRouter(prefix="/auth", tags=["authentication"])


class ConnectResponse(BaseModel):
    athlete: AthleteCard
    is_new: bool
    sync_log_id: int
    message: str


@router.get("/authorize")
def authorize():
    """Redirect to Strava for authorization"""
    logger.info("Authorization flow initiated")

    url = auth_service.authorization_url()

    logger.debug("Generated authorization URL", url=url)
    return RedirectResponse(url=url)


@router.get("/callback", response_model=ConnectResponse)
async def callback(
    code: str,
    db: AsyncSession = Depends(get_session),
    session_maker: async_sessionmaker = Depends(get_session_maker),
    worker: SyncWorker = Depends(get_sync_worker),
):
    """Exchange the OAuth code, store the athlete and start a full sync."""
    logger.info("OAuth callback received", has_code=bool(code))

    try:
        token_response = auth_service.exchange_code(code)
        profile = await AsyncStravaClient(
            access_token=token_response["access_token"]
        ).get_athlete()
    except Exception as e:
        logger.error(
            "OAuth callback failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise HTTPException(status_code=400, detail="Authorization failed") from e

    athlete, is_new = await athlete_service.upsert_athlete(
        db,
        profile,
        access_token=token_response["access_token"],
        refresh_token=token_response["refresh_token"],
        expires_at=token_response["expires_at"],
    )

    sync_log_id = await worker.start(session_maker, athlete.id, SyncType.FULL)

    logger.info(
        "OAuth flow completed successfully",
        athlete_id=athlete.id,
        is_new_user=is_new,
        sync_log_id=sync_log_id,
    )

    greeting = "Welcome" if is_new else "Welcome back"
    return ConnectResponse(
        athlete=athlete_card(athlete),
        is_new=is_new,
        sync_log_id=sync_log_id,
        message=f"{greeting}, {athlete.firstname or 'athlete'}!",
    )


@router.delete("/deauthorize/{athlete_id}")
async def deauthorize_athlete(
    athlete_id: int,
    db: AsyncSession = Depends(get_session),
    worker: SyncWorker = Depends(get_sync_worker),
    _: None = Depends(verify_admin_api_key),
):
    """
    Disconnect an athlete (requires admin API key).

    Revokes the Strava token and deletes the athlete with their activities,
    stats snapshot and sync history. A sync running for the athlete is
    allowed to finish first, so it cannot write rows after the delete.
    """
    logger.info("Deauthorization requested", athlete_id=athlete_id)

    await worker.wait(athlete_id)

    athlete = await auth_service.deauthorize_athlete(db, athlete_id)
    if not athlete:
        logger.warning("Deauthorization failed - athlete not found", athlete_id=athlete_id)
        raise HTTPException(status_code=404, detail="Athlete not found")

    logger.info("Athlete deauthorized successfully", athlete_id=athlete_id)

    return {
        "status": "success",
        "message": f"{athlete.full_name or athlete_id} has been disconnected",
        "athlete_id": athlete_id,
    }
