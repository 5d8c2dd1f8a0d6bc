"""Classification of listener return values.

A listener either returns a plain value (``Immediate``) or something that
completes later (``Deferred``). Only deferred results matter to the bus: their
eventual failure may be captured and routed to the ``'error'`` channel.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import concurrent.futures
from dataclasses import dataclass
import logging
from typing import Any

from .exceptions import LoopRequiredError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Immediate:
    """A listener result that is already final."""

    value: Any


@dataclass(frozen=True)
class Deferred:
    """A listener result exposing ``add_done_callback``.

    Covers ``asyncio.Future``/``asyncio.Task`` and
    ``concurrent.futures.Future``.
    """

    future: Any

    def on_failure(self, callback: Callable[[BaseException], None]) -> None:
        """Call ``callback`` with the exception if the future fails.

        Successful and cancelled futures never reach the callback. When a loop
        is running, ``concurrent.futures.Future`` completions are handed to it,
        so the callback never runs inside the current call or on a worker
        thread.
        """

        def _done(future: Any) -> None:
            if future.cancelled():
                LOGGER.debug(
                    "bus.deferred.cancelled",
                    extra={"event": "bus.deferred.cancelled"},
                )
                return
            exc = future.exception()
            if exc is not None:
                callback(exc)

        if isinstance(self.future, concurrent.futures.Future):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self.future.add_done_callback(
                    lambda future: loop.call_soon_threadsafe(_done, future)
                )
                return
        self.future.add_done_callback(_done)


ListenerResult = Immediate | Deferred


def classify(value: Any) -> ListenerResult:
    """Wrap a listener return value as ``Immediate`` or ``Deferred``.

    Coroutine objects are scheduled on the running loop. Without a running
    loop they can never execute, so the coroutine is closed and
    ``LoopRequiredError`` is raised for the caller's error policy.
    """
    if asyncio.iscoroutine(value):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            value.close()
            raise LoopRequiredError(
                "coroutine listener requires a running event loop"
            ) from None
        return Deferred(loop.create_task(value))
    if callable(getattr(value, "add_done_callback", None)):
        return Deferred(value)
    return Immediate(value)
