"""Tests for the HTTP listener (infra/http_server.py).

A real ``StatusHTTPServer`` runs on an ephemeral 127.0.0.1 port with the
fake driver behind it.
"""

from __future__ import annotations

import http.client
import json
import socket
import threading
import time
from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import MagicMock

import pytest

from mongo_rs_status.core.dispatcher import StatusDispatcher
from mongo_rs_status.core.encoder import ReplyEncoder
from mongo_rs_status.core.executor import ReplicaSetService
from mongo_rs_status.core.guard import ConnectionGuard
from mongo_rs_status.core.models import AdminReply
from mongo_rs_status.exceptions import UpstreamError
from mongo_rs_status.infra import http_server
from mongo_rs_status.infra.extjson_codec import ExtendedJsonCodec
from mongo_rs_status.infra.http_server import StatusHTTPServer, run_server
from tests.fakes import FakeDriver

StartServer = Callable[..., tuple[StatusHTTPServer, ConnectionGuard]]


def _dispatcher(driver: FakeDriver) -> tuple[StatusDispatcher, ConnectionGuard]:
    codec = ExtendedJsonCodec()
    guard = ConnectionGuard(driver, "mongodb://db:27017", 5.0, closer=lambda task: task())
    service = ReplicaSetService(driver, codec, admin_db="admin", timeout=5.0)
    return StatusDispatcher(guard, service, ReplyEncoder(codec)), guard


@pytest.fixture
def start_server() -> Iterator[StartServer]:
    servers: list[StatusHTTPServer] = []

    def _start(
        driver: FakeDriver,
        *,
        listener_timeout: float = 5.0,
    ) -> tuple[StatusHTTPServer, ConnectionGuard]:
        dispatcher, guard = _dispatcher(driver)
        server = StatusHTTPServer(
            ("127.0.0.1", 0),
            dispatcher,
            listener_timeout=listener_timeout,
        )
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return server, guard

    yield _start

    for server in servers:
        server.shutdown()
        server.server_close()


def _connect(server: StatusHTTPServer) -> http.client.HTTPConnection:
    host, port = server.server_address[:2]
    return http.client.HTTPConnection(host, port, timeout=5)


def _request(
    server: StatusHTTPServer,
    method: str,
    body: bytes | None = None,
) -> tuple[int, dict[str, str], bytes]:
    conn = _connect(server)
    try:
        conn.request(method, "/", body=body)
        resp = conn.getresponse()
        return resp.status, dict(resp.getheaders()), resp.read()
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class TestResponses:
    def test_get_returns_status(self, start_server: StartServer, fake_driver: FakeDriver) -> None:
        server, _ = start_server(fake_driver)
        status, headers, body = _request(server, "GET")

        assert status == 200
        assert headers["Content-Type"] == "application/json"
        assert int(headers["Content-Length"]) == len(body)
        assert json.loads(body)["members"][0]["name"] == "localhost:27017"

    def test_post_is_405(self, start_server: StartServer, fake_driver: FakeDriver) -> None:
        server, _ = start_server(fake_driver)
        status, headers, body = _request(server, "POST", body=b'{"x": 1}')

        assert status == 405
        assert headers["Allow"] == "GET"
        assert json.loads(body)["error"]["kind"] == "MethodNotAllowedError"
        assert fake_driver.connects == 0

    def test_head_is_405_without_body(self, start_server: StartServer, fake_driver: FakeDriver) -> None:
        server, _ = start_server(fake_driver)
        status, _, body = _request(server, "HEAD")
        assert status == 405
        assert body == b""

    @pytest.mark.parametrize("method", ["PROPFIND", "FOO", "DELETE"])
    def test_any_other_verb_is_405_json(
        self, start_server: StartServer, fake_driver: FakeDriver, method: str,
    ) -> None:
        server, _ = start_server(fake_driver)
        status, headers, body = _request(server, method)

        assert status == 405
        assert headers["Allow"] == "GET"
        assert headers["Content-Type"] == "application/json"
        assert json.loads(body)["error"]["status"] == 405
        assert fake_driver.connects == 0

    def test_upstream_failure_is_500(self, start_server: StartServer) -> None:
        driver = FakeDriver(reply=UpstreamError("replSetGetStatus: not running with --replSet"))
        server, _ = start_server(driver)

        status, _, body = _request(server, "GET")

        assert status == 500
        error = json.loads(body)["error"]
        assert error["kind"] == "UpstreamError"
        assert "--replSet" in error["message"]


# ---------------------------------------------------------------------------
# Connection handling
# ---------------------------------------------------------------------------

class TestConnectionHandling:
    def test_body_drained_for_keep_alive(self, start_server: StartServer, fake_driver: FakeDriver) -> None:
        server, _ = start_server(fake_driver)
        conn = _connect(server)
        try:
            conn.request("PUT", "/", body=b"x" * 100_000)
            first = conn.getresponse()
            first.read()
            conn.request("GET", "/")
            second = conn.getresponse()
            payload = second.read()
        finally:
            conn.close()

        assert first.status == 405
        assert second.status == 200
        assert json.loads(payload)["set"] == "rs0"

    def test_idle_connection_closed_after_listener_timeout(
        self, start_server: StartServer, fake_driver: FakeDriver,
    ) -> None:
        server, _ = start_server(fake_driver, listener_timeout=0.2)
        host, port = server.server_address[:2]
        with socket.create_connection((host, port), timeout=5) as sock:
            time.sleep(0.5)
            assert sock.recv(1) == b""

    def test_concurrent_gets_do_not_interleave(self, start_server: StartServer) -> None:
        driver = FakeDriver()
        driver.reply = {
            "set": "rs0",
            "members": [{"_id": i, "name": f"node-{i}:27017"} for i in range(200)],
            "ok": 1.0,
        }
        driver.command_delay = 0.1
        server, _ = start_server(driver)
        expected = ReplyEncoder(ExtendedJsonCodec()).encode(
            AdminReply(command="replSetGetStatus", document=driver.reply),
        )
        results: list[tuple[int, bytes]] = []
        lock = threading.Lock()

        def fetch() -> None:
            status, _, body = _request(server, "GET")
            with lock:
                results.append((status, body))

        threads = [threading.Thread(target=fetch) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert len(results) == 2
        for status, body in results:
            assert status == 200
            assert body == expected
        assert driver.connects == 1


# ---------------------------------------------------------------------------
# run_server
# ---------------------------------------------------------------------------

class TestRunServer:
    def test_interrupt_closes_guard(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def interrupted(self: Any, poll_interval: float = 0.5) -> None:
            raise KeyboardInterrupt

        monkeypatch.setattr(http_server.StatusHTTPServer, "serve_forever", interrupted)
        guard = MagicMock()

        run_server(MagicMock(), guard, port=0, listener_timeout=1.0, host="127.0.0.1")

        guard.close.assert_called_once_with()

    def test_listener_timeout_applied_to_sockets(
        self, start_server: StartServer, fake_driver: FakeDriver,
    ) -> None:
        server, _ = start_server(fake_driver, listener_timeout=7.5)
        assert server.listener_timeout == 7.5
