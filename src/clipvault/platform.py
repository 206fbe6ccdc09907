"""
Platform utilities for clipvault.

- Paths for config, state/logs, persisted history and the IPC socket
- Basic environment detection helpers
"""

from __future__ import annotations

import os
from pathlib import Path


APP_NAME = "clipvault"
SOCKET_FILENAME = "clipvault.sock"
HISTORY_FILENAME = "history.json"
PINNED_FILENAME = "pinned.json"


def xdg_config_dir() -> Path:
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def xdg_state_dir() -> Path:
    base = os.environ.get("XDG_STATE_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".local" / "state" / APP_NAME


def xdg_data_dir() -> Path:
    base = os.environ.get("XDG_DATA_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".local" / "share" / APP_NAME


def runtime_dir() -> Path:
    # Prefer XDG_RUNTIME_DIR (per-user tmp with correct perms),
    # fall back to /tmp if not set.
    base = os.environ.get("XDG_RUNTIME_DIR")
    if base:
        return Path(base)
    return Path("/tmp")


def socket_path() -> Path:
    return runtime_dir() / SOCKET_FILENAME


def history_path() -> Path:
    """Capacity-bounded recents file."""
    return xdg_data_dir() / HISTORY_FILENAME


def pinned_path() -> Path:
    """Uncapped pinned/favorite file."""
    return xdg_data_dir() / PINNED_FILENAME


def ensure_dirs() -> None:
    xdg_config_dir().mkdir(parents=True, exist_ok=True)
    xdg_state_dir().mkdir(parents=True, exist_ok=True)
    xdg_data_dir().mkdir(parents=True, exist_ok=True)


def active_env_summary() -> str:
    session = os.environ.get("XDG_SESSION_TYPE", "unknown")
    de = os.environ.get("XDG_CURRENT_DESKTOP", "")
    return f"session={session}, desktop={de}"
