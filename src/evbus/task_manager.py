"""Lifetime tracking for deferred listener results."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from typing import Any

from .results import Deferred

LOGGER = logging.getLogger(__name__)


class DeferredTracker:
    """Hold strong references to pending deferred results until they finish.

    The event loop only keeps weak references to tasks, so a coroutine
    listener scheduled by ``emit`` would otherwise be collectable before it
    completes. Entries self-clean when done. Nothing here cancels.
    """

    def __init__(self) -> None:
        self._pending: set[Any] = set()

    def add(self, deferred: Deferred, *, log_failures: bool = False) -> None:
        """Track ``deferred.future``.

        With ``log_failures`` set, a failure nobody captures is logged so it
        is not silently lost.
        """
        future = deferred.future
        if future.done():
            if log_failures:
                self._log_exception(future)
            return
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)
        if log_failures:
            future.add_done_callback(self._log_exception)

    def _log_exception(self, future: Any) -> None:
        if future.cancelled():
            return
        try:
            exc = future.exception()
        except Exception:
            return
        if exc is not None:
            LOGGER.warning(
                "bus.deferred.uncaptured",
                extra={
                    "event": "bus.deferred.uncaptured",
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )

    def __len__(self) -> int:
        return len(self._pending)

    async def await_all(self) -> None:
        """Await all tracked results without cancelling them.

        Failures are not re-raised here; they belong to the capture path.
        """
        while self._pending:
            for future in list(self._pending):
                awaitable = (
                    asyncio.wrap_future(future)
                    if isinstance(future, concurrent.futures.Future)
                    else future
                )
                try:
                    await asyncio.shield(awaitable)
                except asyncio.CancelledError:
                    if not future.cancelled():
                        raise
                except Exception:
                    pass
                # Done callbacks run on the next loop iteration.
                await asyncio.sleep(0)
                self._pending.discard(future)
        # Completions handed to the loop from other threads run on this yield.
        await asyncio.sleep(0)
