"""Background sync worker.

Runs each sync as an ``asyncio`` task with its own database session and
records the outcome in a ``SyncLog``. At most one sync per athlete is in
flight; a second request while one runs is coalesced onto it. Running
syncs are never cancelled: shutdown waits for them through ``drain()``.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fitclub.core.lifespan import manager
from fitclub.core.logging_config import LoguruLogger, StructuredLogger
from fitclub.sync.models import SyncType
from fitclub.sync.service import SyncService, sync_service


class SyncWorker:
    """Owns in-flight sync tasks, keyed by athlete ID."""

    def __init__(
        self,
        service: SyncService = sync_service,
        log: Optional[StructuredLogger] = None,
    ):
        self.service = service
        self.log = log or LoguruLogger()
        self._in_flight: dict[int, tuple[int, asyncio.Task]] = {}
        self._lock = asyncio.Lock()

    def in_flight(self, athlete_id: int) -> Optional[int]:
        """SyncLog ID of the running sync for an athlete, if any."""
        entry = self._in_flight.get(athlete_id)
        return entry[0] if entry else None

    async def start(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        athlete_id: int,
        sync_type: SyncType = SyncType.INCREMENTAL,
    ) -> int:
        """Start a sync in the background, or join the one already running.

        Parameters
        ----------
        session_maker : async_sessionmaker
            Factory for the task's own sessions; request sessions close
            before the task finishes
        athlete_id : int
            Strava athlete ID
        sync_type : SyncType
            Full history or incremental

        Returns
        -------
        int
            ID of the SyncLog tracking the sync
        """
        async with self._lock:
            running = self.in_flight(athlete_id)
            if running is not None:
                self.log.log(
                    "info", "Sync already in flight", athlete_id=athlete_id, sync_log_id=running
                )
                return running

            async with session_maker() as db:
                sync_log = await self.service.start_log(db, athlete_id, sync_type)

            task = asyncio.create_task(
                self._run(session_maker, athlete_id, sync_type, sync_log.id),
                name=f"sync-{athlete_id}",
            )
            self._in_flight[athlete_id] = (sync_log.id, task)

        self.log.log(
            "info",
            "Sync started",
            athlete_id=athlete_id,
            sync_type=sync_type.value,
            sync_log_id=sync_log.id,
        )
        return sync_log.id

    async def _run(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        athlete_id: int,
        sync_type: SyncType,
        log_id: int,
    ) -> None:
        try:
            async with session_maker() as db:
                result = await self.service.sync_athlete(db, athlete_id, sync_type)
                await self.service.complete_log(db, log_id, result)

            self.log.log(
                "info",
                "Sync completed",
                athlete_id=athlete_id,
                sync_log_id=log_id,
                new_activities=result.new_activities,
                updated_activities=result.updated_activities,
            )
        except Exception as e:
            # Recorded, not raised: nobody awaits this task but drain()
            self.log.log(
                "error",
                "Sync failed",
                athlete_id=athlete_id,
                sync_log_id=log_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            async with session_maker() as db:
                await self.service.fail_log(db, log_id, str(e) or type(e).__name__)
        finally:
            self._in_flight.pop(athlete_id, None)

    async def wait(self, athlete_id: int) -> None:
        """Block until the athlete's running sync, if any, has finished."""
        entry = self._in_flight.get(athlete_id)
        if entry is None:
            return
        self.log.log("info", "Waiting for running sync", athlete_id=athlete_id, sync_log_id=entry[0])
        await asyncio.gather(entry[1], return_exceptions=True)

    async def drain(self) -> None:
        """Wait for every in-flight sync to finish."""
        tasks = [task for _, task in self._in_flight.values()]
        if tasks:
            self.log.log("info", "Waiting for in-flight syncs", count=len(tasks))
            await asyncio.gather(*tasks, return_exceptions=True)


sync_worker = SyncWorker()


@manager.add
@asynccontextmanager
async def sync_worker_lifespan() -> AsyncIterator[dict]:
    """Expose the worker to handlers and wait for running syncs on shutdown."""
    yield {"sync_worker": sync_worker}
    await sync_worker.drain()
