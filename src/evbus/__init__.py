"""In-process publish/subscribe event bus."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .bus import ERROR_EVENT, NEW_LISTENER, REMOVE_LISTENER, EventBus
    from .config import BusConfig, Config, LoggingConfig, load_config
    from .exceptions import (
        ConfigValidationError,
        EventBusError,
        ListenerError,
        LoopRequiredError,
        UnhandledErrorFault,
    )
    from .listeners import ListenerSet
    from .logging_utils import configure_logging
    from .results import Deferred, Immediate, classify

_EXPORTS = {
    "ERROR_EVENT": "bus",
    "EventBus": "bus",
    "NEW_LISTENER": "bus",
    "REMOVE_LISTENER": "bus",
    "BusConfig": "config",
    "Config": "config",
    "LoggingConfig": "config",
    "load_config": "config",
    "ConfigValidationError": "exceptions",
    "EventBusError": "exceptions",
    "ListenerError": "exceptions",
    "LoopRequiredError": "exceptions",
    "UnhandledErrorFault": "exceptions",
    "ListenerSet": "listeners",
    "configure_logging": "logging_utils",
    "Deferred": "results",
    "Immediate": "results",
    "classify": "results",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:
    """Lazily import symbols so ``import evbus`` does not pull in pydantic or structlog."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    value = getattr(import_module(f".{module_name}", __name__), name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
