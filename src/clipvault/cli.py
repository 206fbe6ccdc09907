#!/usr/bin/env python3
"""
clipvault CLI

Thin client that sends JSON requests over a Unix domain socket to the running daemon.

Subcommands:
  - history list/activate/pin/favorite/clear
  - settings max-items (live, via the daemon)
  - status
  - config show-paths/set (local settings.ini, read on next daemon start)

Exit codes:
  0: success
  1: transport/daemon not running or general error
  2: invalid arguments
  3: server-side action failed
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict

from .client_ipc import send_request, cli_exit_code_from_response
from .config import DEFAULT_SETTINGS, set_general_option
from .platform import xdg_config_dir, xdg_state_dir, history_path, pinned_path, socket_path


def _print_response(ok: bool, resp: Dict[str, Any]) -> int:
    code = cli_exit_code_from_response(ok, resp)
    if ok:
        data = resp.get("data")
        if data is None:
            print("OK")
        else:
            print(json.dumps(data, ensure_ascii=False, indent=2))
    else:
        msg = resp.get("error", "error")
        print(msg, file=sys.stderr)
    return code


def cmd_history_list(args: argparse.Namespace) -> int:
    payload: Dict[str, Any] = {"op": "history.list"}
    if args.query:
        payload["query"] = args.query
    if args.limit is not None:
        payload["limit"] = args.limit
    ok, resp = send_request(payload)
    if ok and not args.json:
        items = (resp.get("data") or {}).get("items") or []
        for item in items:
            marks = ("P" if item.get("pinned") else "-") + ("F" if item.get("favorite") else "-")
            first_line = str(item.get("text", "")).splitlines()[0] if item.get("text") else ""
            print(f"{item.get('id', ''):>5} {marks} {first_line}")
        return 0
    return _print_response(ok, resp)


def cmd_history_activate(args: argparse.Namespace) -> int:
    if not args.text or not args.text.strip():
        print("TEXT must not be empty", file=sys.stderr)
        return 2
    ok, resp = send_request({"op": "history.activate", "text": args.text})
    return _print_response(ok, resp)


def cmd_history_pin(args: argparse.Namespace) -> int:
    ok, resp = send_request({"op": "history.pin", "text": args.text, "on": not args.off})
    return _print_response(ok, resp)


def cmd_history_favorite(args: argparse.Namespace) -> int:
    ok, resp = send_request({"op": "history.favorite", "text": args.text, "on": not args.off})
    return _print_response(ok, resp)


def cmd_history_clear(args: argparse.Namespace) -> int:
    if not args.yes:
        print("history clear removes pinned and favorite entries too; pass --yes to confirm", file=sys.stderr)
        return 2
    ok, resp = send_request({"op": "history.clear"})
    return _print_response(ok, resp)


def cmd_settings_max_items(args: argparse.Namespace) -> int:
    if args.value < 1:
        print("max-items must be >= 1", file=sys.stderr)
        return 2
    # Persist first so the value survives a daemon restart.
    try:
        set_general_option("max_items", args.value)
    except OSError as e:
        print(f"config set failed: {e}", file=sys.stderr)
        return 3
    ok, resp = send_request({"op": "settings.max_items", "value": args.value})
    return _print_response(ok, resp)


def cmd_status(_args: argparse.Namespace) -> int:
    ok, resp = send_request({"op": "status"})
    return _print_response(ok, resp)


# ------------- Config CLI helpers -------------

def _config_paths() -> Dict[str, str]:
    return {
        "settings": str(xdg_config_dir() / "settings.ini"),
        "history": str(history_path()),
        "pinned": str(pinned_path()),
        "state_log": str(xdg_state_dir() / "clipvault.log"),
        "socket": str(socket_path()),
    }


def cmd_config_show_paths(args: argparse.Namespace) -> int:
    paths = _config_paths()
    if getattr(args, "json", False):
        print(json.dumps(paths, ensure_ascii=False, indent=2))
    else:
        for k, v in paths.items():
            print(f"{k}: {v}")
    return 0


def cmd_config_set(args: argparse.Namespace) -> int:
    try:
        path = set_general_option(args.key, args.value)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 2
    except OSError as e:
        print(f"config set failed: {e}", file=sys.stderr)
        return 3
    print(f"general.{args.key} = {args.value} ({path})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="clipvault", description="Clipboard history CLI")
    sub = p.add_subparsers(dest="sub")

    # history
    p_hist = sub.add_parser("history", help="history operations")
    sub_hist = p_hist.add_subparsers(dest="sub_hist")

    p_hist_list = sub_hist.add_parser("list", help="list history entries in display order")
    p_hist_list.add_argument("--query", help="case-insensitive substring filter")
    p_hist_list.add_argument("--limit", type=int, default=None)
    p_hist_list.add_argument("--json", action="store_true", help="print full records as JSON")
    p_hist_list.set_defaults(func=cmd_history_list)

    p_hist_act = sub_hist.add_parser("activate", help="copy an entry back to the clipboard")
    p_hist_act.add_argument("text", help="entry text")
    p_hist_act.set_defaults(func=cmd_history_activate)

    p_hist_pin = sub_hist.add_parser("pin", help="pin an entry")
    p_hist_pin.add_argument("text", help="entry text")
    p_hist_pin.add_argument("--off", action="store_true", help="unpin instead")
    p_hist_pin.set_defaults(func=cmd_history_pin)

    p_hist_fav = sub_hist.add_parser("favorite", help="mark an entry as favorite")
    p_hist_fav.add_argument("text", help="entry text")
    p_hist_fav.add_argument("--off", action="store_true", help="remove the favorite mark instead")
    p_hist_fav.set_defaults(func=cmd_history_favorite)

    p_hist_clear = sub_hist.add_parser("clear", help="remove all entries and persisted files")
    p_hist_clear.add_argument("--yes", action="store_true", help="confirm")
    p_hist_clear.set_defaults(func=cmd_history_clear)

    # settings (live)
    p_set = sub.add_parser("settings", help="change settings of the running daemon")
    sub_set = p_set.add_subparsers(dest="sub_set")
    p_set_max = sub_set.add_parser("max-items", help="set the history capacity")
    p_set_max.add_argument("value", type=int)
    p_set_max.set_defaults(func=cmd_settings_max_items)

    # status
    p_status = sub.add_parser("status", help="show daemon status")
    p_status.set_defaults(func=cmd_status)

    # config
    p_cfg = sub.add_parser("config", help="configuration utilities")
    sub_cfg = p_cfg.add_subparsers(dest="sub_cfg")

    p_cfg_paths = sub_cfg.add_parser("show-paths", help="print important file paths")
    p_cfg_paths.add_argument("--json", action="store_true", help="print as JSON")
    p_cfg_paths.set_defaults(func=cmd_config_show_paths)

    p_cfg_set = sub_cfg.add_parser("set", help="write a [general] option to settings.ini")
    p_cfg_set.add_argument("key", choices=sorted(DEFAULT_SETTINGS["general"]))
    p_cfg_set.add_argument("value")
    p_cfg_set.set_defaults(func=cmd_config_set)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    try:
        return args.func(args)
    except KeyboardInterrupt:
        return 1


if __name__ == "__main__":
    sys.exit(main())
