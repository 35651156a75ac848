"""Logging configuration using loguru.

This module configures structured logging with environment-specific formatters:
- Local: Colorized console output with source file:line numbers
- Staging/Production: JSON structured logs for log aggregation tools

Standard library logging from third-party libraries is routed into loguru.
Code that runs outside a request (the sync worker) receives a
``StructuredLogger`` instead of importing the global logger, so it can be
swapped for a recording logger in tests.
"""

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Protocol

from loguru import logger

from fitclub.config import get_settings
from fitclub.core.lifespan import manager
from fitclub.core.middleware import get_request_id


class StructuredLogger(Protocol):
    """Capability for emitting a log line with structured fields."""

    def log(self, level: str, message: str, **fields: Any) -> None: ...


class LoguruLogger:
    """``StructuredLogger`` backed by the configured loguru logger."""

    def log(self, level: str, message: str, **fields: Any) -> None:
        logger.opt(depth=1).bind(**fields).log(level.upper(), message)


def sink_serializer(message):
    """Custom sink that serializes records to clean JSON."""
    record = message.record
    subset = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
        "message": record["message"],
    }

    # Custom fields passed as kwargs / bind()
    for key, value in record["extra"].items():
        if not key.startswith("_") and value is not None:
            subset[key] = value

    if record["exception"]:
        exc_type, exc_value, _ = record["exception"]
        subset["exception"] = {
            "type": exc_type.__name__ if exc_type else None,
            "value": str(exc_value),
        }

    print(json.dumps(subset, default=str), file=sys.stderr)


def add_request_id(record) -> None:
    """Attach the current request_id to every record emitted inside a request."""
    record["extra"].setdefault("request_id", get_request_id())


class InterceptHandler(logging.Handler):
    """Handler that intercepts standard logging and routes to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def configure_logging() -> None:
    """Configure loguru for the current environment.

    Removes the default handler, installs the console or JSON sink and
    replaces stdlib logging handlers (SQLAlchemy, httpx, uvicorn) with
    ``InterceptHandler``.
    """
    settings = get_settings()

    logger.remove()
    logger.configure(patcher=add_request_id)

    if settings.ENVIRONMENT == "local":
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level> | {extra}"
            ),
            level=settings.LOG_LEVEL,
            colorize=True,
        )
    else:
        logger.add(sink_serializer, level=settings.LOG_LEVEL)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


@manager.add
@asynccontextmanager
async def logging_lifespan() -> AsyncIterator[dict]:
    """Log application startup and shutdown events."""
    settings = get_settings()

    logger.info(
        "Application starting",
        app_name=settings.APP_NAME,
        environment=settings.ENVIRONMENT,
        log_level=settings.LOG_LEVEL,
        lifespans=manager.registered,
    )

    yield {}

    logger.info("Application shutting down")
