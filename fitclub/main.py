from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

import fitclub.core.database  # noqa: F401 - registers database lifespan
import fitclub.core.logging_config  # noqa: F401 - registers logging lifespan
import fitclub.sync.worker  # noqa: F401 - registers sync worker lifespan
from fitclub.activities.router import router as activities_router
from fitclub.athletes.router import router as athletes_router
from fitclub.auth.router import router as auth_router
from fitclub.config import get_settings
from fitclub.core.lifespan import manager
from fitclub.core.logging_config import configure_logging
from fitclub.core.middleware import (
    LoggingMiddleware,
    RequestContextMiddleware,
    get_request_id,
)
from fitclub.scoring.router import router as leaderboard_router
from fitclub.stats.router import app_router, router as stats_router
from fitclub.sync.router import router as sync_router

# Configure logging FIRST (before app creation and settings access)
configure_logging()

settings = get_settings()

app_configs = {
    "title": settings.APP_NAME,
    "version": "1.0.0",
    "lifespan": manager,
}

if settings.ENVIRONMENT not in ("local", "staging"):
    app_configs["openapi_url"] = None

app = FastAPI(**app_configs)

# Add middleware (order matters - last added runs first)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestContextMiddleware)  # Must run before logging

if settings.CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(auth_router)
app.include_router(athletes_router)
app.include_router(activities_router)
app.include_router(stats_router)
app.include_router(app_router)
app.include_router(leaderboard_router)
app.include_router(sync_router)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with structured logging.

    Parameters
    ----------
    request : Request
        The HTTP request that caused the exception
    exc : Exception
        The unhandled exception

    Returns
    -------
    JSONResponse
        Error response with request_id for tracking
    """
    request_id = get_request_id()
    logger.opt(exception=exc).error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "request_id": request_id},
    )


@app.get("/health")
async def health():
    return {"status": "healthy"}
