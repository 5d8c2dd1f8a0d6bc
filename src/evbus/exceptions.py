"""Domain exception hierarchy for the event bus."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class EventBusError(RuntimeError):
    """Base class for all event bus errors."""


class ListenerError(EventBusError):
    """Raised when a listener, or the deferred result it returned, fails.

    Only the dispatch path builds these; the original exception is kept on
    ``cause`` and chained as ``__cause__``.
    """

    def __init__(
        self,
        event: str,
        cause: BaseException,
        listener: Callable[..., Any] | None = None,
    ) -> None:
        name = getattr(listener, "__qualname__", None) or repr(listener)
        super().__init__(
            f"Listener {name} for event {event!r} failed: "
            f"{type(cause).__name__}: {cause}"
        )
        self.event = event
        self.listener = listener
        self.cause = cause
        self.__cause__ = cause


class UnhandledErrorFault(EventBusError):
    """Raised when ``'error'`` is emitted and nobody listens for it."""

    def __init__(self, emitted: tuple[Any, ...]) -> None:
        cause: Any = emitted[0] if len(emitted) == 1 else emitted
        super().__init__(f"Unhandled 'error' event: {cause!r}")
        self.cause = cause
        if emitted and isinstance(emitted[0], BaseException):
            self.__cause__ = emitted[0]


class ConfigValidationError(EventBusError):
    """Raised when configuration cannot be validated safely."""


class LoopRequiredError(EventBusError):
    """Raised when a coroutine listener is called outside a running event loop."""
