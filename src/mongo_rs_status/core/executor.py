"""Core replica-set service — timeout-scoped administrative commands.

Each public method executes exactly one administrative command through
the :class:`~mongo_rs_status.core.protocols.MongoDriver` injected at
construction time and returns its reply.  The driver opens a fresh
timeout scope per call; nothing here retries.

Guarantees
----------
* No ``pymongo`` import, no ``print()``.
* Only :class:`~mongo_rs_status.exceptions.RsStatusError` subclasses
  escape.
* A malformed initiation document never reaches the network.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mongo_rs_status.core.models import AdminReply
from mongo_rs_status.core.protocols import DocumentCodec, MongoDriver
from mongo_rs_status.exceptions import RsStatusError, UpstreamError

STATUS_COMMAND: str = "replSetGetStatus"
INITIATE_COMMAND: str = "replSetInitiate"


class ReplicaSetService:
    """Runs replica-set status and initiation commands.

    Parameters
    ----------
    driver:
        Any object satisfying the :class:`MongoDriver` protocol.
    codec:
        Extended-JSON codec used to parse initiation documents.
    admin_db:
        Database the commands run against.
    timeout:
        Default per-call timeout in seconds.
    """

    def __init__(
        self,
        driver: MongoDriver,
        codec: DocumentCodec,
        *,
        admin_db: str,
        timeout: float,
    ) -> None:
        self._driver: MongoDriver = driver
        self._codec: DocumentCodec = codec
        self._admin_db: str = admin_db
        self._timeout: float = timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def query_status(
        self,
        handle: Any,
        *,
        db: str | None = None,
        timeout: float | None = None,
    ) -> AdminReply:
        """Return the ``replSetGetStatus`` reply for the cluster behind *handle*.

        Raises
        ------
        UpstreamError
            When the cluster rejects the command (not initiated, not a
            replica-set member, ...).  Surfaced verbatim, never retried.
        OperationTimeoutError
            When the request exceeds its deadline.
        ConnectError
            When the connection fails mid-request.
        """
        return self._run(handle, {STATUS_COMMAND: 1}, db=db, timeout=timeout)

    def initiate(
        self,
        handle: Any,
        document: bytes,
        *,
        db: str | None = None,
        timeout: float | None = None,
    ) -> AdminReply:
        """Initiate the replica set with the extended-JSON *document*.

        Raises
        ------
        ParseError
            When *document* is malformed.  No request is issued.
        UpstreamError
            When the cluster rejects the configuration (already
            initiated, unreachable members, ...).
        OperationTimeoutError
            When the request exceeds its deadline.
        """
        config = self._codec.loads(document)
        return self._run(handle, {INITIATE_COMMAND: config}, db=db, timeout=timeout)

    # ------------------------------------------------------------------
    # Driver delegation (safe boundary)
    # ------------------------------------------------------------------

    def _run(
        self,
        handle: Any,
        command: Mapping[str, Any],
        *,
        db: str | None,
        timeout: float | None,
    ) -> AdminReply:
        name = next(iter(command))
        try:
            document = self._driver.run_command(
                handle,
                db or self._admin_db,
                command,
                self._timeout if timeout is None else timeout,
            )
        except RsStatusError:
            raise
        except Exception as exc:
            raise UpstreamError(f"{name}: unexpected driver error: {exc}") from exc
        return AdminReply(command=name, document=document)
