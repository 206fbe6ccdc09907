import itertools
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from clipvault.config import VaultConfig
from clipvault.vault import ClipboardVault


class FakeTimers:
    """Manual main loop: callbacks fire only when advance() passes their deadline."""

    def __init__(self) -> None:
        self.now = 0
        self._ids = itertools.count(1)
        self.sources: Dict[int, Tuple[int, int, Callable[[], bool]]] = {}
        self.removed: List[int] = []

    def timeout_add(self, interval_ms: int, callback: Callable[[], bool]) -> int:
        handle = next(self._ids)
        self.sources[handle] = (self.now + interval_ms, interval_ms, callback)
        return handle

    def source_remove(self, handle: int) -> None:
        self.removed.append(handle)
        self.sources.pop(handle, None)

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [(deadline, h) for h, (deadline, _, _) in self.sources.items() if deadline <= target]
            if not due:
                break
            deadline, handle = min(due)
            self.now = deadline
            _, interval, callback = self.sources[handle]
            if callback():
                if handle in self.sources:
                    self.sources[handle] = (self.now + interval, interval, callback)
            else:
                self.sources.pop(handle, None)
        self.now = target


class FakeClipboard:
    """Reads stay outstanding until complete()/fail() is called."""

    def __init__(self) -> None:
        self.reads: List[Callable[[Optional[str], Optional[BaseException]], None]] = []
        self.written: List[str] = []

    def read_text_async(self, callback) -> None:
        self.reads.append(callback)

    def complete(self, text: Optional[str]) -> None:
        self.reads.pop(0)(text, None)

    def fail(self, error: BaseException) -> None:
        self.reads.pop(0)(None, error)

    def write_text(self, text: str) -> None:
        self.written.append(text)


class Clock:
    def __init__(self, start: int = 1_000) -> None:
        self.value = start

    def __call__(self) -> int:
        self.value += 1
        return self.value


@pytest.fixture
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def data_paths(tmp_path: Path) -> Tuple[Path, Path]:
    return tmp_path / "data" / "history.json", tmp_path / "data" / "pinned.json"


@pytest.fixture
def make_vault(clipboard, timers, clock, data_paths):
    def _make(**overrides) -> ClipboardVault:
        config = VaultConfig(**overrides)
        history, pinned = data_paths
        return ClipboardVault(config, clipboard, timers, history, pinned, clock=clock)

    return _make
