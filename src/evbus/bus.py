"""In-process event bus with Node-style listener and error semantics.

Usage:
    bus = EventBus(capture_exceptions=True)

    def on_saved(path):
        print(f"Saved: {path}")

    bus.on("file.saved", on_saved)
    bus.once("file.saved", lambda path: print("first save only"))
    bus.on("error", lambda err: print(f"listener failed: {err.cause!r}"))

    bus.emit("file.saved", "/tmp/notes.txt")

Dispatch is synchronous. Listeners returning a future or coroutine may have
their later failure captured and routed to ``'error'`` when
``capture_rejections`` is enabled.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any

from .config import DEFAULT_MAX_LISTENERS, BusConfig, parse_bus_config
from .exceptions import ListenerError, UnhandledErrorFault
from .listeners import Listener, ListenerSet
from .results import Deferred, classify
from .task_manager import DeferredTracker

LOGGER = logging.getLogger(__name__)

NEW_LISTENER = "newListener"
REMOVE_LISTENER = "removeListener"
ERROR_EVENT = "error"

RejectionHook = Callable[..., None]


def _listener_name(listener: Listener) -> str:
    return getattr(listener, "__qualname__", None) or repr(listener)


class EventBus:
    """Registry of named events to ordered listeners with synchronous dispatch.

    Not thread-safe: every call is expected on one thread of control.

    ``on_uncaptured_rejection`` may be assigned (or defined by a subclass) to
    receive ``(error, event, *args)`` for failed deferred results instead of
    the ``'error'`` event.
    """

    on_uncaptured_rejection: RejectionHook | None = None

    def __init__(
        self,
        *,
        capture_rejections: bool = False,
        capture_exceptions: bool = False,
        max_listeners: int = DEFAULT_MAX_LISTENERS,
    ) -> None:
        options = parse_bus_config(
            {
                "capture_rejections": capture_rejections,
                "capture_exceptions": capture_exceptions,
                "max_listeners": max_listeners,
            }
        )
        self._listeners_by_event: dict[str, ListenerSet] = {}
        self._capture_rejections = options.capture_rejections
        self._capture_exceptions = options.capture_exceptions
        self._max_listeners = options.max_listeners
        self._leak_warned: set[str] = set()
        self._deferred = DeferredTracker()

    @classmethod
    def from_config(cls, config: BusConfig | Mapping[str, Any]) -> EventBus:
        """Build a bus from a ``BusConfig`` or the ``bus`` section of a config dict."""
        options = parse_bus_config(config)
        return cls(**options.model_dump())

    @property
    def capture_rejections(self) -> bool:
        return self._capture_rejections

    @property
    def capture_exceptions(self) -> bool:
        return self._capture_exceptions

    # Registration

    def on(self, event: str, listener: Listener, *, first: bool = False) -> EventBus:
        """Register ``listener`` for every emission of ``event``."""
        return self.add_listener(event, listener, first=first)

    def once(self, event: str, listener: Listener, *, first: bool = False) -> EventBus:
        """Register ``listener`` for the next emission of ``event`` only."""
        return self.add_listener(event, listener, once=True, first=first)

    def add_listener(
        self,
        event: str,
        listener: Listener,
        *,
        once: bool = False,
        first: bool = False,
    ) -> EventBus:
        """Register ``listener`` for ``event``.

        ``'newListener'`` is emitted before the listener is added, so its
        handlers never see the listener they are told about. A listener that
        is already registered keeps its slot unless ``first`` moves it to the
        front; only its ``once`` flag is updated.
        """
        if not callable(listener):
            raise TypeError("listener must be callable")
        self.emit(NEW_LISTENER, event, listener, once)

        listener_set = self._listeners_by_event.get(event)
        if listener_set is None:
            listener_set = self._listeners_by_event[event] = ListenerSet()
        listener_set.add(listener, once=once, first=first)
        LOGGER.debug(
            "bus.listener.added",
            extra={
                "event": "bus.listener.added",
                "event_name": event,
                "listener": _listener_name(listener),
                "once": once,
                "first": first,
            },
        )
        self._check_max_listeners(event, listener_set)
        return self

    add_event_listener = add_listener

    def off(self, event: str, listener: Listener) -> bool:
        """Remove ``listener`` from ``event``.

        Returns ``False`` without side effects when the pair is not
        registered. Otherwise ``'removeListener'`` is emitted once the
        listener is already gone from the registry.
        """
        listener_set = self._listeners_by_event.get(event)
        if listener_set is None or not listener_set.discard(listener):
            return False
        if not listener_set:
            del self._listeners_by_event[event]
            self._leak_warned.discard(event)
        LOGGER.debug(
            "bus.listener.removed",
            extra={
                "event": "bus.listener.removed",
                "event_name": event,
                "listener": _listener_name(listener),
            },
        )
        self.emit(REMOVE_LISTENER, event, listener)
        return True

    remove_listener = off
    remove_event_listener = off

    def remove_all_listeners(self, event: str | None = None) -> EventBus:
        """Remove every listener of ``event``, or of all events when omitted.

        One ``'removeListener'`` is emitted per listener. When clearing
        everything, ``'removeListener'`` listeners go last so they observe
        the other removals.
        """
        if event is not None:
            listener_set = self._listeners_by_event.get(event)
            if listener_set is None:
                return self
            for listener in listener_set:
                self.off(event, listener)
            self._listeners_by_event.pop(event, None)
            self._leak_warned.discard(event)
            return self

        for name in [n for n in self._listeners_by_event if n != REMOVE_LISTENER]:
            self.remove_all_listeners(name)
        self.remove_all_listeners(REMOVE_LISTENER)
        return self

    def get_max_listeners(self) -> int:
        return self._max_listeners

    def set_max_listeners(self, count: int) -> EventBus:
        """Set the per-event listener count that triggers a leak warning (0 disables)."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError("max_listeners must be a non-negative integer.")
        self._max_listeners = count
        return self

    def _check_max_listeners(self, event: str, listener_set: ListenerSet) -> None:
        if not self._max_listeners or len(listener_set) <= self._max_listeners:
            return
        if event in self._leak_warned:
            return
        self._leak_warned.add(event)
        LOGGER.warning(
            "bus.max_listeners.exceeded",
            extra={
                "event": "bus.max_listeners.exceeded",
                "event_name": event,
                "count": len(listener_set),
                "max_listeners": self._max_listeners,
            },
        )

    # Dispatch

    def emit(self, event: str, *args: Any) -> bool:
        """Synchronously call every listener of ``event`` with ``args``.

        Listeners run in order against a snapshot taken on entry. Returns
        whether any listener existed. Emitting ``'error'`` with no listener
        raises ``UnhandledErrorFault``.
        """
        listener_set = self._listeners_by_event.get(event)
        if listener_set is None:
            if event == ERROR_EVENT:
                raise UnhandledErrorFault(args)
            return False

        for listener, once in listener_set.snapshot():
            live = self._listeners_by_event.get(event)
            if live is not None and listener in live:
                # Re-registration during this dispatch may have changed the flag.
                once = live.is_once(listener)
            elif once:
                # A once listener runs only for the dispatch that unregistered it.
                continue
            if once:
                self.off(event, listener)
            self._invoke(event, listener, args)
        return True

    def _invoke(self, event: str, listener: Listener, args: tuple[Any, ...]) -> None:
        try:
            result = classify(listener(*args))
        except Exception as exc:
            self._handle_exception(event, listener, exc)
            return
        if isinstance(result, Deferred):
            self._watch(event, listener, args, result)

    def _handle_exception(self, event: str, listener: Listener, exc: Exception) -> None:
        error = ListenerError(event, exc, listener)
        captured = self._capture_exceptions and event != ERROR_EVENT
        LOGGER.debug(
            "bus.listener.failed",
            extra={
                "event": "bus.listener.failed",
                "event_name": event,
                "listener": _listener_name(listener),
                "error_type": type(exc).__name__,
                "captured": captured,
            },
        )
        if not captured:
            raise error from exc
        self.emit(ERROR_EVENT, error)

    def _watch(
        self,
        event: str,
        listener: Listener,
        args: tuple[Any, ...],
        result: Deferred,
    ) -> None:
        self._deferred.add(result, log_failures=not self._capture_rejections)
        if not self._capture_rejections:
            return

        def _on_failure(exc: BaseException) -> None:
            self._handle_rejection(event, listener, args, exc)

        result.on_failure(_on_failure)

    def _handle_rejection(
        self,
        event: str,
        listener: Listener,
        args: tuple[Any, ...],
        exc: BaseException,
    ) -> None:
        """Route a failed deferred result; runs as its own call into the bus."""
        error = ListenerError(event, exc, listener)
        hook = self.on_uncaptured_rejection
        LOGGER.debug(
            "bus.deferred.failed",
            extra={
                "event": "bus.deferred.failed",
                "event_name": event,
                "listener": _listener_name(listener),
                "error_type": type(exc).__name__,
                "hooked": hook is not None,
            },
        )
        if hook is not None:
            hook(error, event, *args)
            return
        if event != ERROR_EVENT:
            self.emit(ERROR_EVENT, error)
            return
        # Surfaces through the loop's (or executor's) callback error handling.
        raise error

    async def drain(self) -> None:
        """Wait until every tracked deferred result has completed."""
        await self._deferred.await_all()

    # Introspection

    def event_names(self) -> list[str]:
        return list(self._listeners_by_event)

    def listeners(self, event: str) -> list[Listener]:
        listener_set = self._listeners_by_event.get(event)
        return list(listener_set) if listener_set is not None else []

    def listener_count(self, event: str) -> int:
        listener_set = self._listeners_by_event.get(event)
        return len(listener_set) if listener_set is not None else 0

    @property
    def pending_deferred(self) -> int:
        """Number of deferred listener results still being tracked."""
        return len(self._deferred)
