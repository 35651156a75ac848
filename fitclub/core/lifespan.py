"""
Lifespan manager for FastAPI.

Components register their own startup/shutdown context with ``@manager.add``;
the manager enters them in registration order and merges whatever state they
yield into ``request.state``.
"""

from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncIterator, Callable

from fastapi import FastAPI


class LifespanManager:
    """Collects lifespan contexts and runs them as one."""

    def __init__(self):
        self._lifespans: list[Callable] = []

    def add(self, lifespan: Callable) -> Callable:
        """
        Register a lifespan context.

        Usage:
            @manager.add
            @asynccontextmanager
            async def sync_worker_lifespan():
                yield {}
                await sync_worker.drain()
        """
        self._lifespans.append(lifespan)
        return lifespan

    @property
    def registered(self) -> list[str]:
        return [getattr(fn, "__name__", repr(fn)) for fn in self._lifespans]

    @asynccontextmanager
    async def __call__(self, app: FastAPI) -> AsyncIterator[dict[str, Any]]:
        """Enter every registered context; exit them in reverse on shutdown."""
        async with AsyncExitStack() as stack:
            state: dict[str, Any] = {}

            for lifespan_func in self._lifespans:
                try:
                    context = lifespan_func(app)
                except TypeError:
                    context = lifespan_func()

                entered = await stack.enter_async_context(context)
                if entered:
                    state.update(entered)

            yield state


manager = LifespanManager()
