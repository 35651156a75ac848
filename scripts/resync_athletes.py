#!/usr/bin/env python3
"""
Re-sync every authorized athlete from Strava.

Runs the same sync as ``POST /sync/{athlete_id}`` for each athlete in turn,
writing a SyncLog per athlete. Useful after downtime or to backfill the
stats snapshots.

Usage:
    poetry run python scripts/resync_athletes.py            # incremental
    poetry run python scripts/resync_athletes.py --full     # whole history

Features:
- One athlete at a time with progress tracking
- A failing athlete is logged and skipped, not fatal
- Uses 'sync' priority rate limiting (spreads over the 15min window)
"""
import argparse
import asyncio
import sys

from loguru import logger
from sqlalchemy.ext.asyncio import async_sessionmaker

from fitclub.athletes.service import athlete_service
from fitclub.config import get_settings
from fitclub.core.database import build_engine
from fitclub.sync.models import SyncType
from fitclub.sync.service import sync_service

def configure_logger() -> None:
    logger.remove()  # Remove default handler
    logger.add(
        sys.stdout,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="INFO",
    )


async def resync_athletes(session_maker: async_sessionmaker, sync_type: SyncType) -> list[dict]:
    """Sync all authorized athletes; return the failures.

    Athletes whose latest sync is still running (started through the API)
    are skipped rather than synced twice.
    """
    async with session_maker() as db:
        athletes = await athlete_service.list_athletes(db, authorized_only=True)

    total = len(athletes)
    if total == 0:
        logger.info("No authorized athletes")
        return []

    logger.info(f"Running {sync_type.value} sync for {total} athletes")
    errors = []
    skipped = 0

    for i, athlete in enumerate(athletes, 1):
        async with session_maker() as db:
            if await sync_service.has_running_sync(db, athlete.id):
                logger.warning(f"[{i}/{total}] Athlete {athlete.id} already syncing, skipped")
                skipped += 1
                continue

            logger.info(f"[{i}/{total}] Syncing athlete {athlete.id} ({athlete.full_name})")
            sync_log = await sync_service.start_log(db, athlete.id, sync_type)
            try:
                result = await sync_service.sync_athlete(db, athlete.id, sync_type)
            except Exception as e:
                await db.rollback()
                await sync_service.fail_log(db, sync_log.id, str(e))
                logger.error(f"✗ Failed to sync athlete {athlete.id}: {e}")
                errors.append({"athlete_id": athlete.id, "error": str(e)})
                continue

            await sync_service.complete_log(db, sync_log.id, result)
            logger.success(
                f"✓ Athlete {athlete.id}: {result.new_activities} new, "
                f"{result.updated_activities} updated"
            )

    logger.info("=" * 60)
    logger.info(f"Synced: {total - len(errors) - skipped}/{total}, skipped: {skipped}")
    if errors:
        logger.warning("Failed athletes (can retry with POST /sync/{athlete_id}):")
        for err in errors:
            logger.warning(f"  Athlete {err['athlete_id']}: {err['error']}")

    return errors


async def main() -> int:
    configure_logger()
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--full", action="store_true", help="fetch the whole history")
    args = parser.parse_args()

    engine = build_engine(get_settings().DATABASE_URL)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    try:
        sync_type = SyncType.FULL if args.full else SyncType.INCREMENTAL
        errors = await resync_athletes(session_maker, sync_type)
        return 0 if not errors else 1
    finally:
        # Clean up database connection
        await engine.dispose()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
