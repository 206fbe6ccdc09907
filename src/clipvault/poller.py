"""
ClipboardPoller: periodic read of the clipboard on the main loop.

- A repeating timer issues one async read per tick; while a read is
  outstanding further ticks are skipped (at most one read in flight).
- Only genuine changes (trimmed text differs from the last seen value) are
  reported to the callback.
- stop() removes the timer and discards the result of any outstanding read.

Intended use:
    from .poller import ClipboardPoller, GdkClipboardSource
    from .timers import GLibTimers
    poller = ClipboardPoller(GdkClipboardSource(), on_change=handle_text, timers=GLibTimers())
    poller.start()
    ...
    poller.stop()

Callback signature:
    on_change(text: str) with text already trimmed
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

from .logging_setup import preview
from .timers import Timers


POLL_INTERVAL_MS = 600
MIN_POLL_INTERVAL_MS = 50

ReadCallback = Callable[[Optional[str], Optional[BaseException]], None]


class ClipboardSource(Protocol):
    def read_text_async(self, callback: ReadCallback) -> None:
        """Start a read; callback(text, None) on success or (None, error) on failure."""
        ...


class GdkClipboardSource:
    """GTK4 clipboard of the default display."""

    def __init__(self) -> None:
        import gi
        gi.require_version("Gdk", "4.0")
        from gi.repository import Gdk  # type: ignore

        self._gdk = Gdk
        self._display: Optional[Any] = None

    def _ensure_display(self) -> Any:
        if self._display is None:
            self._display = self._gdk.Display.get_default()
        return self._display

    def _clipboard(self) -> Any:
        disp = self._ensure_display()
        if disp is None:
            raise RuntimeError("no default display")
        return disp.get_clipboard()

    def read_text_async(self, callback: ReadCallback) -> None:
        def _on_finish(source: Any, res: Any) -> None:
            try:
                text = source.read_text_finish(res)
            except Exception as e:
                callback(None, e)
                return
            callback(text, None)

        try:
            clip = self._clipboard()
            clip.read_text_async(None, _on_finish)
        except Exception as e:
            callback(None, e)

    def write_text(self, text: str) -> None:
        self._clipboard().set(text)


class ClipboardPoller:
    def __init__(
        self,
        source: ClipboardSource,
        on_change: Callable[[str], None],
        timers: Timers,
        interval_ms: int = POLL_INTERVAL_MS,
        clear_last_seen_on_stop: bool = False,
    ) -> None:
        self._source = source
        self._on_change = on_change
        self._timers = timers
        self._interval_ms = max(MIN_POLL_INTERVAL_MS, int(interval_ms))
        self._clear_last_seen_on_stop = clear_last_seen_on_stop
        self._logger = logging.getLogger("clipvault")

        self._source_id: Optional[Any] = None
        self._pending = False
        self._generation = 0
        self._last_seen = ""

    @property
    def running(self) -> bool:
        return self._source_id is not None

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def last_seen(self) -> str:
        return self._last_seen

    def start(self) -> None:
        if self._source_id is not None:
            self._logger.info("poller.start ignored reason=already-running")
            return
        self._generation += 1
        self._pending = False
        self._source_id = self._timers.timeout_add(self._interval_ms, self._tick)
        self._logger.info("poller.start ok interval_ms=%d", self._interval_ms)

    def stop(self) -> None:
        handle, self._source_id = self._source_id, None
        if handle is not None:
            self._timers.source_remove(handle)
        # Invalidate any outstanding read; its callback compares generations.
        self._generation += 1
        self._pending = False
        if self._clear_last_seen_on_stop:
            self._last_seen = ""
        if handle is not None:
            self._logger.info("poller.stop ok")

    def _tick(self) -> bool:
        if self._source_id is None:
            return False
        if self._pending:
            return True  # previous read still outstanding
        self._pending = True
        generation = self._generation
        try:
            self._source.read_text_async(lambda text, error: self._on_read(generation, text, error))
        except Exception as e:
            self._logger.warning("poller.read failed error=%r", e)
            if generation == self._generation:
                self._pending = False
        return True

    def _on_read(self, generation: int, text: Optional[str], error: Optional[BaseException]) -> None:
        if generation != self._generation or self._source_id is None:
            return  # late result after stop()
        self._pending = False
        if error is not None:
            self._logger.warning("poller.read failed error=%r", error)
            return

        trimmed = (text or "").strip()
        if trimmed == self._last_seen:
            return
        self._last_seen = trimmed
        if not trimmed:
            return
        self._logger.debug("poller.change text=%s", preview(trimmed))
        try:
            self._on_change(trimmed)
        except Exception as e:
            self._logger.exception("poller.callback failed error=%r", e)
