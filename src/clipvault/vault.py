"""
ClipboardVault: wires the history store, clipboard poller and persistence.

Flow:
    poller change -> password filter -> HistoryStore.add_text
    store change  -> presentation listener + debounced save
    startup       -> load history.json + pinned.json, merge, seed the store
    shutdown      -> flush pending save, stop the poller

Presentation layers (IPC commands, any UI) only use get_items/search/
set_listener/activate/set_pinned/set_favorite and never touch the store's
internals.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from . import storage
from .classify import is_password_like
from .config import VaultConfig
from .debounce import Debouncer
from .history import Clock, Entry, HistoryStore
from .logging_setup import preview
from .poller import ClipboardPoller, ClipboardSource
from .timers import Timers


Writer = Callable[[str], None]


class ClipboardVault:
    def __init__(
        self,
        config: VaultConfig,
        source: ClipboardSource,
        timers: Timers,
        history_path: Union[str, Path],
        pinned_path: Union[str, Path],
        writer: Optional[Writer] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._config = config
        self._source = source
        self._history_path = Path(history_path)
        self._pinned_path = Path(pinned_path)
        self._writer = writer
        self._listener: Optional[Callable[[], None]] = None
        self._logger = logging.getLogger("clipvault")
        self._closed = False

        initial: List[Any] = []
        if config.persist_history:
            initial = storage.load_persisted(self._history_path, self._pinned_path)
            self._logger.info("vault.load ok entries=%d", len(initial))

        self.store = HistoryStore(config.max_items, initial, clock=clock)
        self._save_debounce = Debouncer(self._save, config.save_debounce_ms, timers)
        self.store.set_on_change(self._on_store_change)

        self.poller = ClipboardPoller(
            source,
            self._on_clipboard_text,
            timers,
            interval_ms=config.poll_interval_ms,
            clear_last_seen_on_stop=config.clear_last_seen_on_stop,
        )

    @property
    def config(self) -> VaultConfig:
        return self._config

    # ------------- lifecycle -------------

    def start(self) -> None:
        if self._closed:
            return
        self.poller.start()

    def shutdown(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._config.persist_history:
            self._save_debounce.flush()
        else:
            self._save_debounce.cancel()
        self.poller.stop()
        self.store.set_on_change(None)
        self._logger.info("vault.shutdown ok")

    # ------------- capture -------------

    def _on_clipboard_text(self, text: str) -> None:
        if not text or not text.strip():
            return
        if self._config.ignore_password_like and is_password_like(text):
            self._logger.info("vault.capture skipped reason=password-like")
            return
        existed = self.store.get(text) is not None
        if not self.store.add_text(text):
            return
        if existed:
            self._logger.info("vault.capture dedup text=%s", preview(text))
        else:
            self._logger.info("vault.capture ok text=%s", preview(text))

    def _on_store_change(self) -> None:
        if self._listener is not None:
            try:
                self._listener()
            except Exception as e:
                self._logger.exception("vault.listener failed error=%r", e)
        if self._config.persist_history and not self._closed:
            self._save_debounce.run()

    def _save(self) -> None:
        storage.save_entries(self._history_path, self.store.get_items(), include_id=False)
        storage.save_entries(self._pinned_path, self.store.get_pinned_and_favorite_entries(), include_id=True)
        self._logger.debug("vault.save ok entries=%d", self.store.size())

    # ------------- presentation interface -------------

    def set_listener(self, fn: Optional[Callable[[], None]]) -> None:
        self._listener = fn

    def get_items(self) -> List[Entry]:
        return self.store.get_items()

    def search(self, query: Optional[str] = None, limit: Optional[int] = None) -> List[Entry]:
        return self.store.search(query, limit)

    def set_pinned(self, text: Any, pinned: bool) -> bool:
        return self.store.set_pinned(text, pinned)

    def set_favorite(self, text: Any, favorite: bool) -> bool:
        return self.store.set_favorite(text, favorite)

    def activate(self, text: Any) -> bool:
        """Put text back on the system clipboard."""
        if not isinstance(text, str) or not text:
            return False
        writer = self._writer or getattr(self._source, "write_text", None)
        if writer is None:
            self._logger.warning("vault.activate failed reason=no-writer")
            return False
        try:
            writer(text)
        except Exception as e:
            self._logger.warning("vault.activate failed error=%r", e)
            return False
        self._logger.info("vault.activate ok text=%s", preview(text))
        return True

    # ------------- configuration -------------

    def set_max_items(self, n: Any) -> bool:
        try:
            if isinstance(n, bool):
                raise TypeError("bool is not a capacity")
            value = int(n)
        except (TypeError, ValueError, OverflowError):
            self._logger.warning("vault.max_items rejected value=%r", n)
            return False
        self._config.max_items = max(1, value)
        self.store.set_max_items(self._config.max_items)
        return True

    def set_persist_history(self, on: bool) -> None:
        self._config.persist_history = bool(on)
        if not on:
            self._save_debounce.cancel()

    def set_ignore_password_like(self, on: bool) -> None:
        self._config.ignore_password_like = bool(on)

    def clear(self) -> None:
        """Clear trigger: empty the history and remove both persisted files."""
        count = self.store.size()
        self.store.clear()
        self._save_debounce.cancel()
        storage.delete_file(self._history_path)
        storage.delete_file(self._pinned_path)
        self._logger.info("vault.clear ok count=%d", count)
