"""Centralized logging helpers.

Every component logs through ``logging.getLogger(__name__)``. Structured
fields travel in ``extra=extra_context(...)`` so handlers and tests can
inspect them without parsing messages.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

from constants import Constants

_CONTEXT_FIELDS = ("event", "component", "action", "outcome", "target", "module_id", "framework")


def _resolve_level(default: int = logging.INFO) -> int:
    """Return the level requested via the environment, or ``default``."""
    name = os.environ.get(Constants.ENV_LOG_LEVEL, "").strip().upper()
    if not name:
        return default
    value = getattr(logging, name, None)
    return value if isinstance(value, int) else default


def configure_logging(level: Optional[int] = None) -> None:
    """Configure the root logger once with the project format.

    Re-running only adjusts the level so repeated CLI invocations in one
    process (tests) do not stack handlers.
    """
    root = logging.getLogger()
    resolved = level if level is not None else _resolve_level()
    if not any(getattr(h, "_dnaplan_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
        handler._dnaplan_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(resolved)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True if DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` payload, dropping empty values.

    Known context fields are always present (as None when unset) so
    formatters may reference them safely.
    """
    ctx: Dict[str, Any] = {name: None for name in _CONTEXT_FIELDS}
    for key, value in fields.items():
        if value is None:
            continue
        ctx[key] = value
    return ctx


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start: Optional[float] = None
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        """Milliseconds since entry (or until exit, once exited)."""
        if self._start is None:
            return 0.0
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000.0, 3)
