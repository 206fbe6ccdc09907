"""
Configuration loading for clipvault.

- settings.ini in XDG config dir (~/.config/clipvault/settings.ini)

Provides:
- Settings (INI) as a lightweight dict-like wrapper.
- VaultConfig, the explicit configuration passed into the store, poller and vault.
- Atomic write-back of single [general] options.
"""

from __future__ import annotations

import configparser
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .platform import xdg_config_dir, ensure_dirs


DEFAULT_SETTINGS = {
    "general": {
        "max_items": "50",
        "persist_history": "true",
        "ignore_password_like": "true",
        "poll_interval_ms": "600",
        "save_debounce_ms": "1000",
        "clear_last_seen_on_stop": "false",
    },
}

MIN_POLL_INTERVAL_MS = 50


@dataclass
class Settings:
    config: configparser.ConfigParser
    path: Path

    def getint(self, section: str, key: str, fallback: Optional[int] = None) -> int:
        try:
            return self.config.getint(section, key)  # type: ignore[no-any-return]
        except Exception:
            if fallback is None:
                raise
            return fallback

    def getboolean(self, section: str, key: str, fallback: Optional[bool] = None) -> bool:
        try:
            return self.config.getboolean(section, key)  # type: ignore[no-any-return]
        except Exception:
            if fallback is None:
                raise
            return fallback


@dataclass
class VaultConfig:
    max_items: int = 50
    persist_history: bool = True
    ignore_password_like: bool = True
    poll_interval_ms: int = 600
    save_debounce_ms: int = 1000
    # Policy for ClipboardPoller.stop(): keep the last seen text by default so a
    # quick restart does not report the current clipboard again.
    clear_last_seen_on_stop: bool = False

    def __post_init__(self) -> None:
        self.max_items = max(1, int(self.max_items))
        self.poll_interval_ms = max(MIN_POLL_INTERVAL_MS, int(self.poll_interval_ms))
        self.save_debounce_ms = max(0, int(self.save_debounce_ms))

    @classmethod
    def from_settings(cls, settings: Settings) -> "VaultConfig":
        defaults = cls()
        return cls(
            max_items=settings.getint("general", "max_items", fallback=defaults.max_items),
            persist_history=settings.getboolean("general", "persist_history", fallback=defaults.persist_history),
            ignore_password_like=settings.getboolean(
                "general", "ignore_password_like", fallback=defaults.ignore_password_like
            ),
            poll_interval_ms=settings.getint("general", "poll_interval_ms", fallback=defaults.poll_interval_ms),
            save_debounce_ms=settings.getint("general", "save_debounce_ms", fallback=defaults.save_debounce_ms),
            clear_last_seen_on_stop=settings.getboolean(
                "general", "clear_last_seen_on_stop", fallback=defaults.clear_last_seen_on_stop
            ),
        )


def _new_parser_with_defaults() -> configparser.ConfigParser:
    parser = configparser.ConfigParser()
    for section, kv in DEFAULT_SETTINGS.items():
        parser.add_section(section)
        for k, v in kv.items():
            parser.set(section, k, v)
    return parser


def load_settings() -> Settings:
    ensure_dirs()
    ini_path = xdg_config_dir() / "settings.ini"

    parser = _new_parser_with_defaults()
    if ini_path.exists():
        try:
            parser.read(ini_path, encoding="utf-8")
        except configparser.Error:
            # continue with defaults
            parser = _new_parser_with_defaults()

    return Settings(parser, ini_path)


def load_config() -> VaultConfig:
    return VaultConfig.from_settings(load_settings())


# --------- Settings write helpers (atomic) ---------

def _write_ini_atomic(parser: configparser.ConfigParser, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", encoding="utf-8", delete=False, dir=path.parent, prefix=path.name + ".") as tf:
        parser.write(tf)
        tf.flush()
        os.fsync(tf.fileno())
        tmpname = tf.name
    os.replace(tmpname, path)


def set_general_option(key: str, value: object) -> Path:
    """
    Set [general].<key> in settings.ini and write it back atomically.
    Booleans are stored as true/false. Returns the settings path.
    """
    if key not in DEFAULT_SETTINGS["general"]:
        raise ValueError(f"unknown setting: general.{key}")
    settings = load_settings()
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value)
    settings.config.set("general", key, text)
    _write_ini_atomic(settings.config, settings.path)
    return settings.path
