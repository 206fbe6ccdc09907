import json

import pytest

from clipvault import cli, config


@pytest.fixture
def requests(monkeypatch):
    sent = []
    replies = []

    def fake_send(obj, timeout=3.0, path=None):
        sent.append(obj)
        return replies.pop(0) if replies else (True, {"ok": True, "data": {"ok": 1}})

    monkeypatch.setattr(cli, "send_request", fake_send)
    return sent, replies


def test_history_list_plain(requests, capsys):
    sent, replies = requests
    replies.append((True, {"ok": True, "data": {"items": [
        {"id": 3, "text": "line one\nline two", "pinned": True, "favorite": False},
        {"id": 1, "text": "x", "pinned": False, "favorite": True},
    ]}}))
    assert cli.main(["history", "list", "--query", "li", "--limit", "5"]) == 0
    assert sent == [{"op": "history.list", "query": "li", "limit": 5}]
    out = capsys.readouterr().out.splitlines()
    assert out == ["    3 P- line one", "    1 -F x"]


def test_history_list_json(requests, capsys):
    _, replies = requests
    replies.append((True, {"ok": True, "data": {"items": [], "count": 0}}))
    assert cli.main(["history", "list", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {"items": [], "count": 0}


def test_pin_off(requests):
    sent, _ = requests
    assert cli.main(["history", "pin", "abc", "--off"]) == 0
    assert sent == [{"op": "history.pin", "text": "abc", "on": False}]


def test_favorite(requests):
    sent, _ = requests
    cli.main(["history", "favorite", "abc"])
    assert sent == [{"op": "history.favorite", "text": "abc", "on": True}]


def test_clear_requires_confirmation(requests):
    sent, _ = requests
    assert cli.main(["history", "clear"]) == 2
    assert sent == []
    assert cli.main(["history", "clear", "--yes"]) == 0
    assert sent == [{"op": "history.clear"}]


def test_max_items_validation_and_persisted(requests, tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    sent, _ = requests
    assert cli.main(["settings", "max-items", "0"]) == 2
    assert not (tmp_path / "config" / "clipvault" / "settings.ini").exists()
    assert cli.main(["settings", "max-items", "20"]) == 0
    assert sent == [{"op": "settings.max_items", "value": 20}]
    assert config.load_config().max_items == 20


def test_server_error_maps_to_exit_code(requests, capsys):
    _, replies = requests
    replies.append((False, {"ok": False, "error": "no such entry", "code": "NOT_FOUND"}))
    assert cli.main(["history", "pin", "zzz"]) == 3
    assert "no such entry" in capsys.readouterr().err


def test_config_set_and_paths(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    assert cli.main(["config", "set", "max_items", "9"]) == 0
    assert "max_items = 9" in (tmp_path / "config" / "clipvault" / "settings.ini").read_text(encoding="utf-8")
    capsys.readouterr()
    assert cli.main(["config", "show-paths", "--json"]) == 0
    paths = json.loads(capsys.readouterr().out)
    assert paths["history"] == str(tmp_path / "data" / "clipvault" / "history.json")
    assert paths["pinned"] == str(tmp_path / "data" / "clipvault" / "pinned.json")


def test_no_subcommand_prints_help(capsys):
    assert cli.main([]) == 2
