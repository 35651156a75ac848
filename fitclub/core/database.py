from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from fitclub.config import get_settings
from fitclub.core.lifespan import manager


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models"""

    pass


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine, sizing the pool only for server databases."""
    engine_kwargs: dict[str, Any] = {"pool_pre_ping": True, "echo": echo}
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(pool_size=10, max_overflow=20)
    return create_async_engine(database_url, **engine_kwargs)


@manager.add
@asynccontextmanager
async def database_lifespan() -> AsyncIterator[dict]:
    """
    Manage database connection lifecycle.
    Creates connection pool on startup, disposes on shutdown.
    """
    settings = get_settings()
    logger.info("Initializing database connection pool")

    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)

    logger.info("Database connection pool ready")

    # Exposed to handlers through request.state.session_maker
    yield {"session_maker": session_maker}

    logger.info("Shutting down database connection pool")
    await engine.dispose()
    logger.info("Database disconnected")
