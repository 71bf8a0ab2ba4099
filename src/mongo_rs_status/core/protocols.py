"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols, never on ``pymongo`` or
``bson`` directly.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class MongoDriver(Protocol):
    """Contract for the document-store driver.

    Handles are opaque to the core: they are produced by :meth:`connect`
    and only ever passed back into this driver.  Implementations must map
    all backend-specific exceptions to
    :class:`~mongo_rs_status.exceptions.RsStatusError` subclasses.
    """

    def connect(self, uri: str, timeout: float) -> Any:
        """Open a connection to the deployment at *uri*.

        Raises
        ------
        ConnectError
            When the URI is invalid or the client cannot be created.
        OperationTimeoutError
            When establishment exceeds *timeout* seconds.
        """
        ...  # pragma: no cover

    def disconnect(self, handle: Any, timeout: float) -> None:
        """Close *handle*, bounded by *timeout* seconds.

        Raises
        ------
        ConnectError
            When teardown fails.
        """
        ...  # pragma: no cover

    def run_command(
        self,
        handle: Any,
        db: str,
        command: Mapping[str, Any],
        timeout: float,
    ) -> Mapping[str, Any]:
        """Run one administrative *command* against database *db*.

        The first key of *command* names the command.  The returned
        mapping preserves the field order of the server reply.

        Raises
        ------
        UpstreamError
            When the cluster reports a command error.
        OperationTimeoutError
            When the command exceeds *timeout* seconds.
        ConnectError
            When the connection fails mid-command.
        """
        ...  # pragma: no cover


class DocumentCodec(Protocol):
    """Contract for extended-JSON parsing and rendering."""

    def loads(self, raw: bytes) -> dict[str, Any]:
        """Parse *raw* extended JSON into a document.

        Raises
        ------
        ParseError
            When *raw* is malformed or does not hold a JSON object.
        """
        ...  # pragma: no cover

    def dumps(self, document: Mapping[str, Any]) -> str:
        """Render *document* as indented relaxed extended JSON.

        Raises
        ------
        EncodeError
            When *document* holds values the codec cannot represent.
        """
        ...  # pragma: no cover
