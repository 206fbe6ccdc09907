"""
Clipboard history store.

- One entry per distinct trimmed text; re-copying updates the timestamp.
- Display order: pinned, then favorites (not pinned), then recents newest first.
- Capacity bound applies to recents only; pinned and favorite entries are never pruned.
- Reads return copies; a single change listener is invoked after each mutation.

This module does not talk to GTK directly; the poller and the service layer call into it.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple


MAX_ITEMS_DEFAULT = 50

Clock = Callable[[], int]
Listener = Callable[[], None]


def now_ms() -> int:
    return int(time.time() * 1000)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_timestamp(value: Any) -> bool:
    return _is_int(value) or (isinstance(value, float) and math.isfinite(value))


@dataclass
class Entry:
    id: int
    text: str
    timestamp: int
    pinned: bool = False
    favorite: bool = False

    @property
    def is_recent(self) -> bool:
        return not self.pinned and not self.favorite

    def copy(self) -> "Entry":
        return dataclasses.replace(self)

    def to_record(self, include_id: bool = True) -> Dict[str, Any]:
        record: Dict[str, Any] = {}
        if include_id:
            record["id"] = self.id
        record["text"] = self.text
        record["timestamp"] = self.timestamp
        record["pinned"] = bool(self.pinned)
        record["favorite"] = bool(self.favorite)
        return record


def _partition(items: Iterable[Entry]) -> Tuple[List[Entry], List[Entry], List[Entry]]:
    pinned: List[Entry] = []
    favorite: List[Entry] = []
    recents: List[Entry] = []
    for e in items:
        if e.pinned:
            pinned.append(e)
        elif e.favorite:
            favorite.append(e)
        else:
            recents.append(e)
    return pinned, favorite, recents


class HistoryStore:
    """
    Holds the ordered, deduplicated clipboard history.

    initial_entries accepts Entry objects or records as produced by the storage
    codec ({id?, text, timestamp?, pinned?, favorite?}).
    """

    def __init__(
        self,
        max_items: int = MAX_ITEMS_DEFAULT,
        initial_entries: Iterable[Any] = (),
        clock: Optional[Clock] = None,
    ) -> None:
        self._max_items = max(1, int(max_items))
        self._clock: Clock = clock or now_ms
        self._items: List[Entry] = []
        self._by_text: Dict[str, Entry] = {}
        self._on_change: Optional[Listener] = None
        self._logger = logging.getLogger("clipvault")

        self._seed(initial_entries or ())
        self._prune()
        self._sort_order()

    def _seed(self, initial_entries: Iterable[Any]) -> None:
        pending_ids: List[Entry] = []
        used_ids = set()
        for raw in initial_entries:
            record = raw.to_record() if isinstance(raw, Entry) else raw
            if not isinstance(record, Mapping):
                continue
            text = record.get("text")
            if not isinstance(text, str) or not text.strip():
                continue
            text = text.strip()
            if text in self._by_text:
                continue  # first occurrence wins
            timestamp = record.get("timestamp")
            entry = Entry(
                id=0,
                text=text,
                timestamp=int(timestamp) if _is_timestamp(timestamp) else self._clock(),
                pinned=bool(record.get("pinned")),
                favorite=bool(record.get("favorite")),
            )
            ident = record.get("id")
            if _is_int(ident) and ident > 0 and ident not in used_ids:
                entry.id = ident
                used_ids.add(ident)
            else:
                pending_ids.append(entry)
            self._items.append(entry)
            self._by_text[text] = entry

        self._next_id = max(used_ids, default=0) + 1
        for entry in pending_ids:
            entry.id = self._take_id()

    def _take_id(self) -> int:
        ident = self._next_id
        self._next_id += 1
        return ident

    # ------------- mutations -------------

    @property
    def max_items(self) -> int:
        return self._max_items

    def set_max_items(self, n: int) -> None:
        self._max_items = max(1, int(n))
        self._prune()
        self._sort_order()
        self._notify()

    def add_text(self, text: Any) -> bool:
        """
        Record a capture. Returns True if the history changed.
        """
        if not isinstance(text, str):
            return False
        trimmed = text.strip()
        if not trimmed:
            return False

        existing = self._by_text.get(trimmed)
        if existing is not None:
            existing.timestamp = self._clock()
            if existing.is_recent:
                self._move_to_front_of_recents(existing)
            self._prune()
            self._sort_order()
            self._notify()
            return True

        entry = Entry(id=self._take_id(), text=trimmed, timestamp=self._clock())
        self._items.insert(0, entry)
        self._by_text[trimmed] = entry
        self._prune()
        self._sort_order()
        self._notify()
        return True

    def set_pinned(self, text: Any, pinned: bool) -> bool:
        """Never prunes: after an unpin, recents may exceed budget until the next add or set_max_items."""
        entry = self._lookup(text)
        if entry is None or entry.pinned == bool(pinned):
            return False
        entry.pinned = bool(pinned)
        self._sort_order()
        self._notify()
        return True

    def set_favorite(self, text: Any, favorite: bool) -> bool:
        entry = self._lookup(text)
        if entry is None or entry.favorite == bool(favorite):
            return False
        entry.favorite = bool(favorite)
        self._sort_order()
        self._notify()
        return True

    def clear(self) -> None:
        self._items = []
        self._by_text.clear()
        self._notify()

    def set_on_change(self, fn: Optional[Listener]) -> None:
        self._on_change = fn

    # ------------- reads -------------

    def get_items(self) -> List[Entry]:
        return [e.copy() for e in self._items]

    def get_pinned_and_favorite_entries(self) -> List[Entry]:
        return [e.copy() for e in self._items if e.pinned or e.favorite]

    def get(self, text: Any) -> Optional[Entry]:
        entry = self._lookup(text)
        return entry.copy() if entry is not None else None

    def search(self, query: Optional[str], limit: Optional[int] = None) -> List[Entry]:
        """Case-insensitive substring filter in display order."""
        needle = (query or "").strip().lower()
        if needle:
            matches = [e.copy() for e in self._items if needle in e.text.lower()]
        else:
            matches = self.get_items()
        if limit is None:
            return matches
        return matches[: max(0, limit)]

    def size(self) -> int:
        return len(self._items)

    def __len__(self) -> int:
        return len(self._items)

    # ------------- ordering -------------

    def _lookup(self, text: Any) -> Optional[Entry]:
        if not isinstance(text, str):
            return None
        return self._by_text.get(text.strip())

    def _move_to_front_of_recents(self, entry: Entry) -> None:
        pinned, favorite, recents = _partition(self._items)
        recents = [entry] + [e for e in recents if e is not entry]
        self._items = pinned + favorite + recents

    def _sort_order(self) -> None:
        pinned, favorite, recents = _partition(self._items)
        # sorted() is stable with reverse=True: equal timestamps keep their prior order
        recents = sorted(recents, key=lambda e: e.timestamp, reverse=True)
        self._items = pinned + favorite + recents

    def _prune(self) -> None:
        pinned, favorite, recents = _partition(self._items)
        budget = max(0, self._max_items - len(pinned) - len(favorite))
        if len(recents) > budget:
            recents = sorted(recents, key=lambda e: e.timestamp, reverse=True)
            for e in recents[budget:]:
                del self._by_text[e.text]
            recents = recents[:budget]
        self._items = pinned + favorite + recents

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change()
        except Exception as e:
            self._logger.exception("history.listener failed error=%r", e)
