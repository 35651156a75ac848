"""FastAPI dependencies for accessing application state."""

from typing import TYPE_CHECKING, AsyncIterator, cast

from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fitclub.config import get_settings

if TYPE_CHECKING:
    from fitclub.sync.worker import SyncWorker

# Define API key header scheme for Swagger UI
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=True)


def get_session_maker(request: Request) -> async_sessionmaker[AsyncSession]:
    """
    Get the session factory from application state.

    For work that outlives the request (background syncs), which must not
    reuse the request's session.
    """
    return cast(async_sessionmaker, request.state.session_maker)


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """
    Get database session from application state.

    Usage:
        @app.get("/athletes")
        async def list_athletes(session: AsyncSession = Depends(get_session)):
            ...
    """
    session_maker = get_session_maker(request)
    async with session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def get_sync_worker(request: Request) -> "SyncWorker":
    """Get the background sync worker from application state."""
    return cast("SyncWorker", request.state.sync_worker)


async def verify_admin_api_key(api_key: str = Security(api_key_header)) -> None:
    """
    Verify admin API key from X-API-Key header.

    This dependency integrates with Swagger UI's "Authorize" button.

    Usage (on entire router):
        router = APIRouter(prefix="/admin", dependencies=[Depends(verify_admin_api_key)])

    Raises
    ------
    HTTPException
        403 if API key is invalid or missing
    """
    settings = get_settings()
    if api_key != settings.ADMIN_API_KEY:
        raise HTTPException(status_code=403, detail="Invalid API key")
