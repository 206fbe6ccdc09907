import pytest

from clipvault.poller import ClipboardPoller


@pytest.fixture
def changes():
    return []


@pytest.fixture
def poller(clipboard, timers, changes):
    return ClipboardPoller(clipboard, changes.append, timers, interval_ms=600)


def test_reports_only_changes(poller, clipboard, timers, changes):
    poller.start()
    for text in ("a", " a ", "b", "b", None, "a"):
        timers.advance(600)
        clipboard.complete(text)
    assert changes == ["a", "b", "a"]


def test_no_overlapping_reads(poller, clipboard, timers, changes):
    poller.start()
    timers.advance(600)
    assert poller.pending
    timers.advance(600 * 5)
    assert len(clipboard.reads) == 1
    clipboard.complete("x")
    assert not poller.pending
    timers.advance(600)
    assert len(clipboard.reads) == 1
    assert changes == ["x"]


def test_start_is_idempotent(poller, timers, caplog):
    caplog.set_level("INFO", logger="clipvault")
    poller.start()
    poller.start()
    assert len(timers.sources) == 1
    assert "already-running" in caplog.text


def test_stop_discards_outstanding_read(poller, clipboard, timers, changes):
    poller.start()
    timers.advance(600)
    assert len(clipboard.reads) == 1
    poller.stop()
    assert not poller.running
    assert timers.sources == {}
    clipboard.complete("late")
    assert changes == []


def test_restart_ignores_read_from_previous_run(poller, clipboard, timers, changes):
    poller.start()
    timers.advance(600)
    poller.stop()
    poller.start()
    clipboard.complete("stale")
    assert changes == []
    timers.advance(600)
    clipboard.complete("fresh")
    assert changes == ["fresh"]


def test_stop_retains_last_seen_by_default(poller, clipboard, timers, changes):
    poller.start()
    timers.advance(600)
    clipboard.complete("same")
    poller.stop()
    poller.start()
    timers.advance(600)
    clipboard.complete("same")
    assert changes == ["same"]
    assert poller.last_seen == "same"


def test_stop_can_clear_last_seen(clipboard, timers, changes):
    poller = ClipboardPoller(clipboard, changes.append, timers, clear_last_seen_on_stop=True)
    poller.start()
    timers.advance(600)
    clipboard.complete("same")
    poller.stop()
    assert poller.last_seen == ""
    poller.start()
    timers.advance(600)
    clipboard.complete("same")
    assert changes == ["same", "same"]


def test_read_failure_keeps_polling(poller, clipboard, timers, changes, caplog):
    poller.start()
    timers.advance(600)
    clipboard.fail(RuntimeError("no display"))
    assert "poller.read failed" in caplog.text
    assert poller.running
    timers.advance(600)
    clipboard.complete("after")
    assert changes == ["after"]


def test_source_raising_synchronously_keeps_polling(clipboard, timers, changes):
    class Broken:
        calls = 0

        def read_text_async(self, callback):
            Broken.calls += 1
            raise RuntimeError("unavailable")

    poller = ClipboardPoller(Broken(), changes.append, timers)
    poller.start()
    timers.advance(600 * 3)
    assert Broken.calls == 3
    assert not poller.pending
    assert poller.running


def test_callback_exception_is_caught(clipboard, timers, caplog):
    def boom(text):
        raise ValueError(text)

    poller = ClipboardPoller(clipboard, boom, timers)
    poller.start()
    timers.advance(600)
    clipboard.complete("x")
    assert "poller.callback failed" in caplog.text
    timers.advance(600)
    assert len(clipboard.reads) == 1


def test_interval_has_floor(clipboard, timers, changes):
    poller = ClipboardPoller(clipboard, changes.append, timers, interval_ms=1)
    poller.start()
    timers.advance(49)
    assert clipboard.reads == []
    timers.advance(1)
    assert len(clipboard.reads) == 1
