"""
Main-loop timer seam.

The poller and the debounced persister only need two primitives from the
event loop: schedule a callback after an interval, and remove a scheduled
source. GLibTimers maps them onto GLib.timeout_add / GLib.source_remove on the
default main context. Callbacks follow the GLib convention: return True to keep
the source, False to remove it.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol


TimerCallback = Callable[[], bool]


class Timers(Protocol):
    def timeout_add(self, interval_ms: int, callback: TimerCallback) -> Any:
        ...

    def source_remove(self, handle: Any) -> None:
        ...


class GLibTimers:
    def __init__(self) -> None:
        import gi
        gi.require_version("GLib", "2.0")
        from gi.repository import GLib  # type: ignore

        self._glib = GLib

    def timeout_add(self, interval_ms: int, callback: TimerCallback) -> int:
        return self._glib.timeout_add(int(interval_ms), callback)  # type: ignore[no-any-return]

    def source_remove(self, handle: Any) -> None:
        if handle:
            self._glib.source_remove(handle)
