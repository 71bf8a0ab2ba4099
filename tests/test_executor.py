"""Tests for ReplicaSetService (core/executor.py).

The driver is faked, no MongoDB.  These tests verify:

* Command shape and routing (database, timeout).
* Cluster errors surface verbatim as ``UpstreamError``.
* Expired deadlines surface as ``OperationTimeoutError``.
* Malformed initiation documents fail before any request.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from mongo_rs_status.core.executor import ReplicaSetService
from mongo_rs_status.core.models import AdminReply
from mongo_rs_status.exceptions import (
    ConnectError,
    OperationTimeoutError,
    ParseError,
    UpstreamError,
)
from mongo_rs_status.infra.extjson_codec import ExtendedJsonCodec
from tests.fakes import FakeDriver, FakeHandle


def _service(driver: FakeDriver, *, timeout: float = 10.0) -> ReplicaSetService:
    return ReplicaSetService(driver, ExtendedJsonCodec(), admin_db="admin", timeout=timeout)


# ---------------------------------------------------------------------------
# query_status
# ---------------------------------------------------------------------------

class TestQueryStatus:
    def test_returns_reply_with_members(self, fake_driver: FakeDriver) -> None:
        reply = _service(fake_driver).query_status(FakeHandle(1))
        assert isinstance(reply, AdminReply)
        assert reply.command == "replSetGetStatus"
        assert reply.document["members"]

    def test_issues_single_status_command(self, fake_driver: FakeDriver) -> None:
        handle = FakeHandle(1)
        _service(fake_driver).query_status(handle)
        assert fake_driver.commands == [(handle, "admin", {"replSetGetStatus": 1}, 10.0)]

    def test_db_and_timeout_overrides(self, fake_driver: FakeDriver) -> None:
        _service(fake_driver).query_status(FakeHandle(1), db="other", timeout=2.5)
        _, db, _, timeout = fake_driver.commands[0]
        assert db == "other"
        assert timeout == 2.5

    def test_upstream_error_is_surfaced_verbatim(self) -> None:
        error = UpstreamError(
            "replSetGetStatus: no replset config has been received",
            code=94,
            code_name="NotYetInitialized",
        )
        driver = FakeDriver(reply=error)
        with pytest.raises(UpstreamError) as exc_info:
            _service(driver).query_status(FakeHandle(1))
        assert exc_info.value is error
        assert exc_info.value.code == 94
        assert len(driver.commands) == 1

    def test_zero_timeout_raises_timeout_error(self, fake_driver: FakeDriver) -> None:
        with pytest.raises(OperationTimeoutError):
            _service(fake_driver).query_status(FakeHandle(1), timeout=0)

    def test_timeout_is_not_an_upstream_error(self, fake_driver: FakeDriver) -> None:
        with pytest.raises(OperationTimeoutError) as exc_info:
            _service(fake_driver, timeout=0).query_status(FakeHandle(1))
        assert not isinstance(exc_info.value, UpstreamError)

    def test_connect_error_propagates(self) -> None:
        driver = FakeDriver(reply=ConnectError("connection reset"))
        with pytest.raises(ConnectError):
            _service(driver).query_status(FakeHandle(1))

    def test_unexpected_driver_error_wrapped(self) -> None:
        driver = MagicMock()
        driver.run_command.side_effect = KeyError("boom")
        service = ReplicaSetService(driver, ExtendedJsonCodec(), admin_db="admin", timeout=1.0)
        with pytest.raises(UpstreamError, match="unexpected driver error"):
            service.query_status(object())


# ---------------------------------------------------------------------------
# initiate
# ---------------------------------------------------------------------------

class TestInitiate:
    DOCUMENT = (
        b'{"_id": "rs0", "members": ['
        b'{"_id": 0, "host": "mongo-0:27017"},'
        b'{"_id": 1, "host": "mongo-1:27017", "priority": 0}]}'
    )

    def test_sends_parsed_config(self) -> None:
        driver = FakeDriver(reply={"ok": 1.0})
        reply = _service(driver).initiate(FakeHandle(1), self.DOCUMENT)

        _, db, command, _ = driver.commands[0]
        assert db == "admin"
        assert list(command) == ["replSetInitiate"]
        config = command["replSetInitiate"]
        assert config["_id"] == "rs0"
        assert [m["host"] for m in config["members"]] == ["mongo-0:27017", "mongo-1:27017"]
        assert reply.command == "replSetInitiate"
        assert reply.document == {"ok": 1.0}

    def test_extended_json_values_are_decoded(self) -> None:
        driver = FakeDriver(reply={"ok": 1.0})
        document = b'{"_id": "rs0", "version": {"$numberLong": "2"}, "members": []}'
        _service(driver).initiate(FakeHandle(1), document)
        config = driver.commands[0][2]["replSetInitiate"]
        assert config["version"] == 2

    @pytest.mark.parametrize(
        "document",
        [
            b"{not json",
            b"",
            b"[1, 2, 3]",
            b'"rs0"',
            b"\xff\xfe",
        ],
    )
    def test_malformed_document_never_reaches_driver(self, document: bytes) -> None:
        driver = FakeDriver(reply={"ok": 1.0})
        with pytest.raises(ParseError):
            _service(driver).initiate(FakeHandle(1), document)
        assert driver.commands == []

    def test_rejection_is_upstream_error(self) -> None:
        driver = FakeDriver(
            reply=UpstreamError("replSetInitiate: already initialized", code=23),
        )
        with pytest.raises(UpstreamError, match="already initialized"):
            _service(driver).initiate(FakeHandle(1), self.DOCUMENT)

    def test_initiate_timeout(self) -> None:
        driver = FakeDriver(reply={"ok": 1.0})
        with pytest.raises(OperationTimeoutError):
            _service(driver).initiate(FakeHandle(1), self.DOCUMENT, timeout=0)
