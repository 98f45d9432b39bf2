"""Centralized logging bootstrap for tmux-toggle-pane.

// [LAW:single-enforcer] Logger handler wiring is enforced in this module only.
// [LAW:one-source-of-truth] Runtime log path/level are derived here and returned to callers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path


@dataclass(frozen=True)
class LoggingRuntime:
    """Resolved runtime logging configuration."""

    level_name: str
    level: int
    file_path: str


_RUNTIME: LoggingRuntime | None = None


def _parse_level(raw: str) -> tuple[str, int]:
    normalized = str(raw or "INFO").strip().upper()
    level = getattr(logging, normalized, logging.INFO)
    level_name = logging.getLevelName(level)
    return str(level_name), int(level)


def _default_log_path() -> str:
    log_dir = Path(
        os.environ.get(
            "TOGGLE_PANE_LOG_DIR",
            os.path.expanduser("~/.local/share/tmux-toggle-pane/logs"),
        )
    )
    return str(log_dir / "toggle-pane.log")


def _make_stream_handler() -> logging.Handler:
    # run-shell surfaces stderr inside tmux, so only problems go there.
    handler = logging.StreamHandler()
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))
    return handler


def _make_file_handler(level: int, file_path: str) -> logging.Handler:
    handler = RotatingFileHandler(
        file_path,
        maxBytes=20 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [pid=%(process)d] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def configure(debug: bool = False) -> LoggingRuntime:
    """Configure toggle_pane logger hierarchy with stderr + rotating file handlers.

    Idempotent: repeated calls return the originally configured runtime.
    ``debug`` forces DEBUG regardless of $TOGGLE_PANE_LOG_LEVEL.
    """
    global _RUNTIME
    if _RUNTIME is not None:
        return _RUNTIME

    raw_level = "DEBUG" if debug else os.environ.get("TOGGLE_PANE_LOG_LEVEL", "INFO")
    level_name, level = _parse_level(raw_level)
    file_path = os.environ.get("TOGGLE_PANE_LOG_FILE", _default_log_path())

    # [LAW:single-enforcer] All toggle_pane module loggers propagate to this one logger.
    logger = logging.getLogger("toggle_pane")
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers.clear()
    logger.addHandler(_make_stream_handler())
    try:
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        logger.addHandler(_make_file_handler(level, file_path))
    except OSError as e:
        logger.warning("log file %s unavailable: %s", file_path, e)
        file_path = ""

    # Keep libtmux quiet unless it is warning+.
    root = logging.getLogger()
    if root.level > logging.WARNING:
        root.setLevel(logging.WARNING)

    logging.captureWarnings(True)

    _RUNTIME = LoggingRuntime(level_name=level_name, level=level, file_path=file_path)
    return _RUNTIME


def get_runtime() -> LoggingRuntime | None:
    """Return configured logging runtime, if configure() has run."""
    return _RUNTIME


def reset() -> None:
    """Drop the configured runtime and handlers. Used by tests."""
    global _RUNTIME
    _RUNTIME = None
    logger = logging.getLogger("toggle_pane")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
