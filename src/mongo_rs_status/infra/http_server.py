"""Threaded HTTP listener bound to a :class:`StatusDispatcher`.

One thread serves each connection.  Every request body is drained
before the response is written so keep-alive connections stay usable,
and every socket carries the listener timeout (three times the
per-operation timeout) for reads, writes and idle keep-alive waits.
"""

from __future__ import annotations

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any

from mongo_rs_status.core.dispatcher import StatusDispatcher
from mongo_rs_status.core.guard import ConnectionGuard
from mongo_rs_status.core.models import HttpResponse
from mongo_rs_status.version import __version__

logger = logging.getLogger(__name__)

_DRAIN_CHUNK: int = 64 * 1024


class StatusHTTPServer(ThreadingHTTPServer):
    """``ThreadingHTTPServer`` carrying the dispatcher and socket timeout."""

    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        dispatcher: StatusDispatcher,
        *,
        listener_timeout: float,
    ) -> None:
        self.dispatcher: StatusDispatcher = dispatcher
        self.listener_timeout: float = listener_timeout
        super().__init__(address, StatusRequestHandler)


class StatusRequestHandler(BaseHTTPRequestHandler):
    """Routes every verb to the dispatcher; the dispatcher decides 200/405/500."""

    server: StatusHTTPServer
    protocol_version = "HTTP/1.1"
    server_version = f"mongo-rs-status/{__version__}"

    def setup(self) -> None:
        self.timeout = self.server.listener_timeout
        super().setup()

    def do_GET(self) -> None:
        self._handle()

    def __getattr__(self, name: str) -> Any:
        # http.server looks up do_<VERB>; every verb goes to the dispatcher.
        if name.startswith("do_"):
            return self._handle
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    def _handle(self) -> None:
        try:
            response = self.server.dispatcher.dispatch(self.command)
        finally:
            self._drain_body()
        self._write_response(response)

    def _drain_body(self) -> None:
        """Consume any request body so the connection can be reused."""
        if self.headers.get("Transfer-Encoding", "").lower() == "chunked":
            self.close_connection = True
            return
        try:
            remaining = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            self.close_connection = True
            return
        try:
            while remaining > 0:
                chunk = self.rfile.read(min(remaining, _DRAIN_CHUNK))
                if not chunk:
                    break
                remaining -= len(chunk)
        except OSError as exc:
            logger.debug("Failed to drain request body: %s", exc)
            self.close_connection = True

    def _write_response(self, response: HttpResponse) -> None:
        self.send_response(response.status)
        self.send_header("Content-Type", response.content_type)
        self.send_header("Content-Length", str(len(response.body)))
        for name, value in response.headers:
            self.send_header(name, value)
        self.end_headers()
        if self.command != "HEAD":
            try:
                self.wfile.write(response.body)
            except OSError as exc:
                logger.warning("Failed to serve request: %s", exc)
                self.close_connection = True

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        logger.info("%s - %s", self.address_string(), format % args)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run_server(
    dispatcher: StatusDispatcher,
    guard: ConnectionGuard,
    *,
    port: int,
    listener_timeout: float,
    host: str = "",
) -> None:
    """Serve until interrupted, then close the listener and the guard."""
    server = StatusHTTPServer(
        (host, port),
        dispatcher,
        listener_timeout=listener_timeout,
    )
    logger.info("Listening at port %d", port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    finally:
        server.server_close()
        guard.close()
