"""pymongo backed implementation of :class:`~mongo_rs_status.core.protocols.MongoDriver`.

This module is the **only** place in the codebase that talks to
``pymongo``.  Every pymongo exception is caught here and re-raised as a
typed :class:`~mongo_rs_status.exceptions.RsStatusError` subclass, so
nothing raw escapes the infrastructure boundary.

Each operation runs inside its own :func:`pymongo.timeout` scope, so
deadlines are independent per call and never accumulate.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import ModuleType
from typing import Any, NoReturn

from mongo_rs_status.exceptions import (
    ConnectError,
    EnvironmentError,
    OperationTimeoutError,
    UpstreamError,
)


def _import_pymongo() -> ModuleType:
    """Return the ``pymongo`` module or raise :class:`EnvironmentError`."""
    try:
        import pymongo
        import pymongo.errors
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "pymongo is not installed. Install with: pip install pymongo",
        ) from exc
    return pymongo


def _check_deadline(timeout: float, operation: str) -> None:
    """Fail before any I/O when *timeout* leaves no time at all.

    ``pymongo.timeout(0)`` means "no deadline", not "already expired".
    """
    if timeout <= 0:
        raise OperationTimeoutError(f"{operation}: operation timed out")


class PyMongoDriver:
    """Concrete :class:`MongoDriver` backed by :class:`pymongo.MongoClient`.

    Handles returned by :meth:`connect` are ``MongoClient`` instances.
    The class satisfies the protocol structurally; no explicit
    inheritance required.
    """

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def connect(self, uri: str, timeout: float) -> Any:
        """Create a client for *uri* with every driver timeout set to *timeout*.

        Raises
        ------
        ConnectError
            For an invalid URI or client options.
        """
        pymongo = _import_pymongo()
        timeout_ms = max(1, int(timeout * 1000))
        try:
            return pymongo.MongoClient(
                uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
                timeoutMS=timeout_ms,
                document_class=dict,
            )
        except pymongo.errors.ConfigurationError as exc:
            raise ConnectError(
                f"Invalid connection settings: {exc}",
                hint="Check --uri or the MONGODB_URI environment variable.",
            ) from exc
        except pymongo.errors.PyMongoError as exc:
            self._raise_mapped(exc, "connect")

    def disconnect(self, handle: Any, timeout: float) -> None:
        """Close the client behind *handle*.

        Raises
        ------
        ConnectError
            When the client fails to shut down cleanly.
        """
        _check_deadline(timeout, "disconnect")
        pymongo = _import_pymongo()
        try:
            with pymongo.timeout(timeout):
                handle.close()
        except pymongo.errors.PyMongoError as exc:
            raise ConnectError(f"disconnect: {exc}") from exc

    def run_command(
        self,
        handle: Any,
        db: str,
        command: Mapping[str, Any],
        timeout: float,
    ) -> Mapping[str, Any]:
        """Run *command* against database *db* within a *timeout* scope.

        Raises
        ------
        UpstreamError
            When the server answers with a command error.
        OperationTimeoutError
            When the deadline expires, including server selection.
        ConnectError
            When the connection drops mid-command.
        """
        pymongo = _import_pymongo()
        from bson.errors import BSONError

        name = next(iter(command))
        _check_deadline(timeout, name)
        try:
            with pymongo.timeout(timeout):
                reply = handle[db].command(dict(command))
        except pymongo.errors.PyMongoError as exc:
            self._raise_mapped(exc, name)
        except BSONError as exc:
            raise UpstreamError(f"{name}: cannot encode command: {exc}") from exc
        return dict(reply)

    # ------------------------------------------------------------------
    # Exception mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _raise_mapped(exc: Exception, operation: str) -> NoReturn:
        """Translate a ``PyMongoError`` into a domain exception."""
        import pymongo.errors

        if getattr(exc, "timeout", False):
            raise OperationTimeoutError(
                f"{operation}: operation timed out: {exc}",
                hint="Check that the cluster is reachable or raise --timeout.",
            ) from exc
        if isinstance(exc, pymongo.errors.OperationFailure):
            details = exc.details or {}
            message = details.get("errmsg") or str(exc)
            raise UpstreamError(
                f"{operation}: {message}",
                code=exc.code,
                code_name=details.get("codeName"),
            ) from exc
        if isinstance(exc, pymongo.errors.ConnectionFailure):
            raise ConnectError(f"{operation}: connection failure: {exc}") from exc
        raise UpstreamError(f"{operation}: {exc}") from exc
