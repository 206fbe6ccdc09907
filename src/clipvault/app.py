#!/usr/bin/env python3
"""
clipvault-daemon: background service that records clipboard history.

- Gio.Application (no window); hold() keeps the GLib main loop alive.
- Polls the clipboard of the default display, persists history under the XDG
  data dir and answers CLI requests over the IPC socket.

Requirements:
- Python 3.10+
- PyGObject with GTK 4 (provided by system packages, e.g., python3-gi, gir1.2-gtk-4.0)

Run:
    clipvault-daemon
"""

import signal
import sys
import threading

try:
    import gi
    gi.require_version("Gtk", "4.0")
    gi.require_version("Gio", "2.0")
    from gi.repository import Gtk, Gio, GLib  # type: ignore
except Exception as e:
    print("Error: GTK4/PyGObject not available. Please install system packages (e.g., python3-gi, gir1.2-gtk-4.0).")
    print(f"Details: {e}")
    sys.exit(1)

from .commands import dispatch
from .config import load_config
from .logging_setup import setup_logging
from .platform import active_env_summary, ensure_dirs, history_path, pinned_path
from .poller import GdkClipboardSource
from .server_ipc import IPCServer
from .timers import GLibTimers
from .vault import ClipboardVault


MAIN_LOOP_TIMEOUT_S = 2.0


class VaultApplication(Gio.Application):
    def __init__(self) -> None:
        super().__init__(application_id="org.clipvault.daemon",
                         flags=Gio.ApplicationFlags.FLAGS_NONE)
        self._logger = setup_logging()
        self._ipc: IPCServer | None = None
        self._vault: ClipboardVault | None = None

    def do_startup(self) -> None:
        Gio.Application.do_startup(self)
        # Gdk needs an initialized display before the clipboard can be read.
        Gtk.init()
        self._logger.info("Starting clipvault (%s)", active_env_summary())
        ensure_dirs()

        config = load_config()
        self._vault = ClipboardVault(
            config,
            GdkClipboardSource(),
            GLibTimers(),
            history_path(),
            pinned_path(),
        )
        self._vault.start()

        self._ipc = IPCServer(self._ipc_handler)
        self._ipc.start()

        # Quit through the main loop so do_shutdown flushes pending saves.
        for signum in (signal.SIGINT, signal.SIGTERM):
            GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signum, self._on_signal)
        self.hold()

    def _on_signal(self) -> bool:
        self._logger.info("signal received, quitting")
        self.quit()
        return False

    def do_activate(self) -> None:
        # Nothing to present; a second launch just logs.
        self._logger.info("clipvault already running")

    def do_shutdown(self) -> None:
        self._logger.info("Shutting down")
        if self._ipc:
            self._ipc.stop()
        if self._vault:
            self._vault.shutdown()
        Gio.Application.do_shutdown(self)

    # ------------- IPC handler -------------
    def _ipc_handler(self, req: dict) -> dict:
        """
        Called on the IPC thread. The vault is only touched on the main loop,
        so the request is scheduled with GLib.idle_add and awaited here.
        """
        result: dict = {}
        done = threading.Event()

        def _run_on_main() -> bool:
            try:
                if self._vault is None:
                    result.update({"ok": False, "error": "not ready", "code": "NOT_RUNNING"})
                else:
                    result.update(dispatch(self._vault, req))
            except Exception as e:
                self._logger.exception("ipc.dispatch failed error=%r", e)
                result.update({"ok": False, "error": str(e), "code": "ACTION_FAILED"})
            finally:
                done.set()
            return False  # run once

        GLib.idle_add(_run_on_main, priority=GLib.PRIORITY_DEFAULT)
        if not done.wait(MAIN_LOOP_TIMEOUT_S):
            return {"ok": False, "error": "main loop busy", "code": "TIMEOUT"}
        return result


def main(argv=None) -> int:
    app = VaultApplication()
    return app.run(argv or sys.argv)


if __name__ == "__main__":
    sys.exit(main())
