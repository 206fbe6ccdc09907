"""
Request dispatch for the clipvault IPC protocol.

Requests are dicts with an "op" key; responses are
{"ok": true, "data": ...} or {"ok": false, "error": "...", "code": "..."}.

Ops:
  - history.list      {query?, limit?}
  - history.activate  {text}
  - history.pin       {text, on?}
  - history.favorite  {text, on?}
  - history.clear
  - settings.max_items {value}
  - status
"""

from __future__ import annotations

from typing import Any, Callable, Dict

from .vault import ClipboardVault


Request = Dict[str, Any]
Response = Dict[str, Any]


def _error(message: str, code: str) -> Response:
    return {"ok": False, "error": message, "code": code}


def _text_arg(req: Request) -> Any:
    text = req.get("text")
    if not isinstance(text, str) or not text.strip():
        return None
    return text


def _op_list(vault: ClipboardVault, req: Request) -> Response:
    limit = req.get("limit")
    if limit is not None:
        try:
            if isinstance(limit, bool):
                raise TypeError("bool is not a limit")
            limit = int(limit)
        except (TypeError, ValueError, OverflowError):
            return _error("limit must be an integer", "INVALID_ARG")
    query = req.get("query")
    if query is not None and not isinstance(query, str):
        return _error("query must be a string", "INVALID_ARG")
    items = [e.to_record() for e in vault.search(query, limit)]
    return {"ok": True, "data": {"items": items, "count": len(items)}}


def _op_activate(vault: ClipboardVault, req: Request) -> Response:
    text = _text_arg(req)
    if text is None:
        return _error("text is required", "INVALID_ARG")
    if not vault.activate(text):
        return _error("could not set clipboard", "ACTION_FAILED")
    return {"ok": True, "data": {"op": "history.activate", "len": len(text)}}


def _flag_op(name: str, setter: Callable[[ClipboardVault, str, bool], bool]) -> Callable[[ClipboardVault, Request], Response]:
    def _op(vault: ClipboardVault, req: Request) -> Response:
        text = _text_arg(req)
        if text is None:
            return _error("text is required", "INVALID_ARG")
        on = bool(req.get("on", True))
        if vault.store.get(text) is None:
            return _error("no such entry", "NOT_FOUND")
        changed = setter(vault, text, on)
        return {"ok": True, "data": {"op": name, "on": on, "changed": changed}}

    return _op


def _op_clear(vault: ClipboardVault, req: Request) -> Response:
    vault.clear()
    return {"ok": True, "data": {"op": "history.clear"}}


def _op_max_items(vault: ClipboardVault, req: Request) -> Response:
    if not vault.set_max_items(req.get("value")):
        return _error("value must be an integer", "INVALID_ARG")
    return {"ok": True, "data": {"max_items": vault.store.max_items, "size": vault.store.size()}}


def _op_status(vault: ClipboardVault, req: Request) -> Response:
    cfg = vault.config
    return {
        "ok": True,
        "data": {
            "size": vault.store.size(),
            "max_items": vault.store.max_items,
            "pinned_or_favorite": len(vault.store.get_pinned_and_favorite_entries()),
            "persist_history": cfg.persist_history,
            "ignore_password_like": cfg.ignore_password_like,
            "polling": vault.poller.running,
        },
    }


OPS: Dict[str, Callable[[ClipboardVault, Request], Response]] = {
    "history.list": _op_list,
    "history.activate": _op_activate,
    "history.pin": _flag_op("history.pin", lambda v, t, on: v.set_pinned(t, on)),
    "history.favorite": _flag_op("history.favorite", lambda v, t, on: v.set_favorite(t, on)),
    "history.clear": _op_clear,
    "settings.max_items": _op_max_items,
    "status": _op_status,
}


def dispatch(vault: ClipboardVault, req: Any) -> Response:
    if not isinstance(req, dict):
        return _error("request must be an object", "INVALID_ARG")
    op = str(req.get("op", ""))
    handler = OPS.get(op)
    if handler is None:
        return _error(f"unsupported op: {op}", "INVALID_OP")
    return handler(vault, req)
