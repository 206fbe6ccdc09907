"""
Debounced action with manual flush.

Coalesces frequent save requests into one deferred call. At most one deferred
call is pending at any time.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .timers import Timers


class Debouncer:
    def __init__(self, fn: Callable[[], None], delay_ms: int, timers: Timers) -> None:
        self._fn = fn
        self._delay_ms = max(0, int(delay_ms))
        self._timers = timers
        self._handle: Optional[Any] = None
        self._logger = logging.getLogger("clipvault")

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def run(self) -> None:
        """(Re)schedule the action delay_ms from now."""
        self._remove_pending()
        self._handle = self._timers.timeout_add(self._delay_ms, self._fire)

    def flush(self) -> None:
        """Drop any pending schedule and run the action now."""
        self._remove_pending()
        self._invoke()

    def cancel(self) -> None:
        self._remove_pending()

    def _fire(self) -> bool:
        self._handle = None
        self._invoke()
        return False  # one-shot

    def _invoke(self) -> None:
        try:
            self._fn()
        except Exception as e:
            self._logger.exception("debounce.run failed error=%r", e)

    def _remove_pending(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            self._timers.source_remove(handle)
