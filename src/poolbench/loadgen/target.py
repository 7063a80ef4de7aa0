"""Fixed-response HTTP/1.1 server used as the load target."""

from __future__ import annotations

import logging
import threading
from types import TracebackType
from typing import Any
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from poolbench.config import TargetConfig

logger = logging.getLogger(__name__)


class TargetBindError(OSError):
    """Raised when the target cannot bind its listening socket."""


class _TargetServer(ThreadingHTTPServer):
    daemon_threads = True
    request_queue_size = 256
    allow_reuse_port = False

    def __init__(self, config: TargetConfig) -> None:
        self.config = config
        self.requests_seen = 0
        self._counter_lock = threading.Lock()
        super().__init__((config.host, config.port), _FixedResponseHandler)

    def next_status(self) -> int:
        with self._counter_lock:
            self.requests_seen += 1
            seen = self.requests_seen
        every = self.config.failure_every
        if every > 0 and seen % every == 0:
            return 503
        return 200


class _FixedResponseHandler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"
    server: _TargetServer

    def do_GET(self) -> None:
        self._respond()

    def do_POST(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        if length:
            self.rfile.read(length)
        self._respond()

    do_HEAD = do_GET

    def _respond(self) -> None:
        config = self.server.config
        body = config.body
        self.send_response(self.server.next_status())
        self.send_header("Content-Type", config.content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        pass


class TestTarget:
    """Owns one listening server; start() and stop() are each effective once."""

    __test__ = False

    def __init__(self, config: TargetConfig) -> None:
        self.config = config
        self._server: _TargetServer | None = None
        self._thread: threading.Thread | None = None
        self._requests_seen = 0

    @property
    def port(self) -> int:
        if self._server is None:
            return self.config.port
        return self._server.server_address[1]

    @property
    def running(self) -> bool:
        return self._server is not None

    @property
    def requests_seen(self) -> int:
        if self._server is None:
            return self._requests_seen
        return self._server.requests_seen

    def start(self) -> None:
        if self._server is not None:
            msg = "Target already started"
            raise RuntimeError(msg)
        try:
            server = _TargetServer(self.config)
        except OSError as exc:
            msg = f"Unable to bind target on {self.config.host}:{self.config.port}: {exc}"
            raise TargetBindError(msg) from exc
        self._server = server
        self._thread = threading.Thread(target=server.serve_forever, name="poolbench-target", daemon=True)
        self._thread.start()
        logger.info("Target listening on %s:%d", self.config.host, self.port)

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._requests_seen = self._server.requests_seen
        logger.info("Target stopped after %d requests", self._requests_seen)
        self._server = None
        self._thread = None

    def __enter__(self) -> TestTarget:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()
