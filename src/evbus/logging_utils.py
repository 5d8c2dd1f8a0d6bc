"""Logging bootstrap for applications embedding the bus."""

from __future__ import annotations

from collections.abc import Mapping
import logging
import os
from pathlib import Path
from typing import Any

import structlog

APP_LOGGER_PREFIX = "evbus"
DEFAULT_LOG_FILE = "~/.local/state/evbus/evbus.log"


def _build_formatter(structured: bool) -> logging.Formatter:
    """JSON lines via structlog, or a plain stdlib line format."""
    if not structured:
        return logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    # The bus logs through stdlib loggers only; ``extra=`` fields become keys.
    return structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(
            ensure_ascii=False, separators=(",", ":")
        ),
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.ExtraAdder(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
        ],
    )


def _open_log_file(path: Path, level: int) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    if os.name == "posix":
        try:
            path.chmod(0o600)
        except OSError:
            logging.getLogger(__name__).warning(
                "Unable to enforce 0600 permissions for %s", path
            )
    return handler


def configure_logging(logging_config: Mapping[str, Any]) -> None:
    """Configure root logging from a ``logging`` config section.

    stderr only shows ``evbus.*`` records at WARNING or above; the optional
    log file receives everything at the configured level.
    """
    level = getattr(logging, str(logging_config.get("level", "INFO")).upper(), logging.INFO)
    formatter = _build_formatter(bool(logging_config.get("structured", True)))

    stderr_handler = logging.StreamHandler()
    stderr_handler.setLevel(max(level, logging.WARNING))
    stderr_handler.addFilter(lambda record: record.name.startswith(APP_LOGGER_PREFIX))
    handlers: list[logging.Handler] = [stderr_handler]

    if logging_config.get("log_to_file", False):
        target = Path(str(logging_config.get("log_file_path", DEFAULT_LOG_FILE)))
        handlers.append(_open_log_file(target.expanduser(), level))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
