import pytest

from clipvault import config
from clipvault.config import VaultConfig


@pytest.fixture
def xdg(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


def test_defaults_without_file(xdg):
    cfg = config.load_config()
    assert cfg == VaultConfig()
    assert cfg.max_items == 50
    assert cfg.poll_interval_ms == 600
    assert cfg.persist_history and cfg.ignore_password_like
    assert cfg.clear_last_seen_on_stop is False


def test_values_from_ini(xdg):
    ini = xdg / "config" / "clipvault" / "settings.ini"
    ini.parent.mkdir(parents=True, exist_ok=True)
    ini.write_text(
        "[general]\nmax_items = 7\npersist_history = no\npoll_interval_ms = 10\nsave_debounce_ms = abc\n",
        encoding="utf-8",
    )
    cfg = config.load_config()
    assert cfg.max_items == 7
    assert cfg.persist_history is False
    assert cfg.poll_interval_ms == config.MIN_POLL_INTERVAL_MS
    assert cfg.save_debounce_ms == 1000


def test_broken_ini_falls_back_to_defaults(xdg):
    ini = xdg / "config" / "clipvault" / "settings.ini"
    ini.parent.mkdir(parents=True, exist_ok=True)
    ini.write_text("max_items = 3\n", encoding="utf-8")
    assert config.load_config().max_items == 50


def test_max_items_floor():
    assert VaultConfig(max_items=0).max_items == 1
    assert VaultConfig(max_items=-3).max_items == 1


def test_set_general_option_round_trip(xdg):
    path = config.set_general_option("max_items", 12)
    config.set_general_option("ignore_password_like", False)
    assert path.exists()
    cfg = config.load_config()
    assert cfg.max_items == 12
    assert cfg.ignore_password_like is False
    assert sorted(p.name for p in path.parent.iterdir()) == ["settings.ini"]


def test_set_general_option_rejects_unknown_key(xdg):
    with pytest.raises(ValueError):
        config.set_general_option("bogus", 1)
