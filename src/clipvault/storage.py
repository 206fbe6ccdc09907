"""
Persistence for clipboard history.

Two JSON files under the XDG data dir (see platform.history_path/pinned_path):
- history.json: the capacity-bounded display list (ids are not written)
- pinned.json: every pinned/favorite entry, uncapped (ids kept)

Writes go to a temp file in the same directory and are moved into place with
os.replace. Reads never raise: missing or corrupted files yield [] and invalid
records are skipped.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Union

from .history import Entry, now_ms


PathLike = Union[str, Path]
Record = Dict[str, Any]

_logger = logging.getLogger("clipvault")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _normalize_record(raw: Any) -> Union[Record, None]:
    if not isinstance(raw, dict) or not isinstance(raw.get("text"), str):
        return None
    ident = raw.get("id")
    timestamp = raw.get("timestamp")
    return {
        "id": ident if isinstance(ident, int) and not isinstance(ident, bool) else None,
        "text": raw["text"],
        "timestamp": int(timestamp) if _is_number(timestamp) else now_ms(),
        "pinned": bool(raw.get("pinned")),
        "favorite": bool(raw.get("favorite")),
    }


def load_entries(path: PathLike) -> List[Record]:
    """
    Load records {id, text, timestamp, pinned, favorite} from a JSON array file.
    id is None when the file did not carry one.
    """
    p = Path(path)
    if not p.exists():
        return []
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError, RecursionError) as e:
        _logger.warning("storage.load failed path=%s error=%r", p, e)
        return []
    if not isinstance(data, list):
        _logger.warning("storage.load ignored path=%s reason=not-a-list", p)
        return []

    records: List[Record] = []
    dropped = 0
    for raw in data:
        record = _normalize_record(raw)
        if record is None:
            dropped += 1
            continue
        records.append(record)
    if dropped:
        _logger.warning("storage.load skipped path=%s invalid=%d", p, dropped)
    return records


def _as_record(item: Union[Entry, Record], include_id: bool) -> Record:
    if isinstance(item, Entry):
        return item.to_record(include_id=include_id)
    record: Record = {}
    if include_id and item.get("id") is not None:
        record["id"] = item.get("id")
    record["text"] = item.get("text")
    record["timestamp"] = item.get("timestamp")
    record["pinned"] = bool(item.get("pinned"))
    record["favorite"] = bool(item.get("favorite"))
    return record


def save_entries(path: PathLike, entries: Iterable[Union[Entry, Record]], include_id: bool = False) -> bool:
    """
    Atomically replace path with the given entries. Returns False (and leaves
    the previous file untouched) on failure.
    """
    p = Path(path)
    tmpname = None
    try:
        payload = json.dumps([_as_record(e, include_id) for e in entries], ensure_ascii=False)
        p.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", delete=False, dir=p.parent, prefix=p.name + ".", suffix=".tmp"
        ) as tf:
            tmpname = tf.name
            tf.write(payload)
            tf.flush()
            os.fsync(tf.fileno())
        os.replace(tmpname, p)
        return True
    except Exception as e:
        _logger.warning("storage.save failed path=%s error=%r", p, e)
        if tmpname:
            try:
                os.unlink(tmpname)
            except OSError:
                pass
        return False


def delete_file(path: PathLike) -> bool:
    """Remove path if present. Returns False only if removal failed."""
    p = Path(path)
    try:
        p.unlink()
    except FileNotFoundError:
        return True
    except OSError as e:
        _logger.warning("storage.delete failed path=%s error=%r", p, e)
        return False
    return True


def merge_entries(pinned: Iterable[Record], recents: Iterable[Record]) -> List[Record]:
    """
    pinned/favorite records win on duplicate text; recents fill the rest.
    """
    merged: List[Record] = []
    seen = set()
    for record in list(pinned) + list(recents):
        key = str(record.get("text") or "").strip()
        if not key or key in seen:
            continue
        seen.add(key)
        merged.append(record)
    return merged


def load_persisted(history_path: PathLike, pinned_path: PathLike) -> List[Record]:
    return merge_entries(load_entries(pinned_path), load_entries(history_path))
