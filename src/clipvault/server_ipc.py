"""
IPC server (Unix Domain Socket) for clipvault.

- Newline-delimited JSON protocol.
- Runs in a background thread so the GLib main loop remains responsive.
- Accepts a handler callable that processes each JSON request and returns a dict response.
  The handler is called on the IPC thread; the daemon marshals it onto the main loop.

Security:
- Socket path: $XDG_RUNTIME_DIR/clipvault.sock (0600)
"""

from __future__ import annotations

import json
import logging
import os
import selectors
import socket
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .platform import socket_path


Request = Dict[str, Any]
Response = Dict[str, Any]
Handler = Callable[[Request], Response]

MAX_LINE_BYTES = 1_000_000


class IPCServer:
    def __init__(self, handler: Handler, path: Optional[Union[str, Path]] = None) -> None:
        self._handler = handler
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._ready = threading.Event()
        self._selector: Optional[selectors.BaseSelector] = None
        self._server_sock: Optional[socket.socket] = None
        self._path = str(path or socket_path())
        self._logger = logging.getLogger("clipvault")

    @property
    def path(self) -> str:
        return self._path

    def start(self, wait: float = 1.0) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._ready.clear()
        self._thread = threading.Thread(target=self._run, name="clipvault-ipc", daemon=True)
        self._thread.start()
        # Wait until bound so clients started right after us can connect.
        self._ready.wait(timeout=wait)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=1.0)
        self._remove_socket_file()

    def _remove_socket_file(self) -> None:
        try:
            if os.path.exists(self._path):
                os.remove(self._path)
        except OSError as e:
            self._logger.warning("ipc.cleanup failed path=%s error=%r", self._path, e)

    def _run(self) -> None:
        self._remove_socket_file()

        sel = selectors.DefaultSelector()
        self._selector = sel

        srv = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        self._server_sock = srv
        try:
            srv.bind(self._path)
        except OSError as e:
            self._logger.error("ipc.bind failed path=%s error=%r", self._path, e)
            srv.close()
            sel.close()
            self._ready.set()
            return

        try:
            os.chmod(self._path, 0o600)
        except OSError:
            pass

        srv.listen(16)
        srv.setblocking(False)
        sel.register(srv, selectors.EVENT_READ)
        self._logger.info("ipc.listen ok path=%s", self._path)
        self._ready.set()

        try:
            while not self._stop_event.is_set():
                events = sel.select(timeout=0.2)
                for key, _ in events:
                    if key.fileobj is srv:
                        self._accept(sel, srv)
                    else:
                        conn_obj = key.fileobj
                        if isinstance(conn_obj, socket.socket):
                            try:
                                self._read(sel, conn_obj)
                            except Exception as e:
                                self._logger.warning("ipc.read failed error=%r", e)
                                self._close(sel, conn_obj)
        finally:
            for key in list(sel.get_map().values()):
                if key.fileobj is not srv and isinstance(key.fileobj, socket.socket):
                    key.fileobj.close()
            sel.close()
            srv.close()
            self._remove_socket_file()

    def _accept(self, sel: selectors.BaseSelector, srv: socket.socket) -> None:
        try:
            conn, _ = srv.accept()
            conn.setblocking(False)
            sel.register(conn, selectors.EVENT_READ, data={"buf": b""})
        except BlockingIOError:
            pass

    def _close(self, sel: selectors.BaseSelector, conn: socket.socket) -> None:
        try:
            sel.unregister(conn)
        except (KeyError, ValueError):
            pass
        conn.close()

    def _read(self, sel: selectors.BaseSelector, conn: socket.socket) -> None:
        try:
            data = conn.recv(65536)
        except BlockingIOError:
            return
        if not data:
            self._close(sel, conn)
            return

        state = sel.get_key(conn).data
        buf = state["buf"] + data
        if len(buf) > MAX_LINE_BYTES and b"\n" not in buf:
            self._logger.warning("ipc.read dropped reason=line-too-long")
            self._close(sel, conn)
            return

        # Possibly several newline-delimited messages per recv; keep the incomplete tail.
        *lines, state["buf"] = buf.split(b"\n")
        for line in lines:
            if not line.strip():
                continue
            response = self._handle_line(line)
            try:
                conn.setblocking(True)
                conn.sendall((json.dumps(response, ensure_ascii=False) + "\n").encode("utf-8"))
                conn.setblocking(False)
            except OSError:
                self._close(sel, conn)
                return

    def _handle_line(self, line: bytes) -> Response:
        try:
            req: Request = json.loads(line.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            return {"ok": False, "error": f"invalid json: {e}", "code": "INVALID_ARG"}
        try:
            resp = self._handler(req)
            if not isinstance(resp, dict):
                return {"ok": False, "error": "handler returned non-dict", "code": "ACTION_FAILED"}
            if "ok" not in resp:
                resp["ok"] = True
            return resp
        except Exception as e:
            self._logger.exception("ipc.handler failed error=%r", e)
            return {"ok": False, "error": str(e), "code": "ACTION_FAILED"}
