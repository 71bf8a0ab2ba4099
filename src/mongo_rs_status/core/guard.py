"""Connection guard — one lazily established, self-healing connection.

The guard owns the single logical connection shared by every request of
the HTTP service.  Its handle slot is a two-state machine::

    EMPTY --acquire (connect)--> HOLDING
    HOLDING --release(invalidate=True, same handle)--> EMPTY
    HOLDING --release(anything else)--> HOLDING

The slot is only read or replaced while :attr:`_lock` is held.
Establishment runs under the lock, so concurrent acquirers queue behind
the first attempt instead of racing to open several connections.
Teardown of an invalidated handle runs in the background after the lock
is released.

There is no retry: recovery is simply that the next :meth:`acquire`
after an invalidation establishes a fresh connection.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from mongo_rs_status.core.models import GuardState
from mongo_rs_status.core.protocols import MongoDriver
from mongo_rs_status.exceptions import (
    ConnectError,
    OperationTimeoutError,
    ParseError,
    RsStatusError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

Closer = Callable[[Callable[[], None]], None]
"""Schedules a teardown callable; the default runs it on a daemon thread."""


def _close_in_thread(task: Callable[[], None]) -> None:
    threading.Thread(target=task, name="mongo-rs-status-close", daemon=True).start()


class ConnectionGuard:
    """Brokers the lifetime of the single shared connection handle.

    Parameters
    ----------
    driver:
        Any object satisfying the :class:`MongoDriver` protocol.
    uri:
        Connection string passed to :meth:`MongoDriver.connect`.
    timeout:
        Seconds allowed for establishment and for teardown.
    invalidate_on_upstream_error:
        Whether a command rejected by the cluster discards the handle.
        Defaults to ``True``: any failed operation is treated as a sign
        the connection may be unhealthy.
    closer:
        Scheduler for background teardown.  Tests pass a synchronous one.
    """

    def __init__(
        self,
        driver: MongoDriver,
        uri: str,
        timeout: float,
        *,
        invalidate_on_upstream_error: bool = True,
        closer: Closer | None = None,
    ) -> None:
        self._driver: MongoDriver = driver
        self._uri: str = uri
        self._timeout: float = timeout
        self._invalidate_on_upstream_error: bool = invalidate_on_upstream_error
        self._closer: Closer = closer or _close_in_thread
        self._lock = threading.Lock()
        self._handle: Any = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> GuardState:
        """Whether the slot currently holds a handle."""
        with self._lock:
            return GuardState.EMPTY if self._handle is None else GuardState.HOLDING

    # ------------------------------------------------------------------
    # Acquire / release
    # ------------------------------------------------------------------

    def acquire(self) -> Any:
        """Return the shared handle, establishing it first if the slot is empty.

        Raises
        ------
        ConnectError
            When establishment fails.  The slot stays empty, so the next
            caller attempts establishment again.
        OperationTimeoutError
            When establishment exceeds the configured timeout.
        """
        with self._lock:
            if self._handle is None:
                self._handle = self._establish()
            return self._handle

    def release(self, handle: Any, invalidate: bool) -> None:
        """Return *handle* to the guard after an operation.

        With ``invalidate=True`` the slot is cleared if it still holds
        *handle*, and *handle* is closed in the background either way.  A
        stale handle never clears a slot that now holds a newer one.
        """
        with self._lock:
            if invalidate and self._handle is not None and self._handle is handle:
                self._handle = None
                logger.info("Discarded connection to %s", self._uri)
        if invalidate:
            self._closer(lambda: self._disconnect_quietly(handle))

    @contextmanager
    def lease(self) -> Iterator[Any]:
        """Acquire a handle for the duration of a ``with`` block.

        The handle is released on exit.  A domain error raised inside the
        block releases it with the outcome of :meth:`should_invalidate`
        and then propagates.
        """
        handle = self.acquire()
        try:
            yield handle
        except RsStatusError as exc:
            self.release(handle, self.should_invalidate(exc))
            raise
        except BaseException:
            self.release(handle, True)
            raise
        else:
            self.release(handle, False)

    def should_invalidate(self, exc: BaseException) -> bool:
        """Decide whether a failed operation discards the shared handle."""
        if isinstance(exc, ParseError):
            return False
        if isinstance(exc, UpstreamError):
            return self._invalidate_on_upstream_error
        return True

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Empty the slot and disconnect the held handle synchronously."""
        with self._lock:
            handle, self._handle = self._handle, None
        if handle is not None:
            self._driver.disconnect(handle, self._timeout)
            logger.info("Closed connection to %s", self._uri)

    # ------------------------------------------------------------------
    # Driver delegation
    # ------------------------------------------------------------------

    def _establish(self) -> Any:
        logger.debug("Connecting to %s", self._uri)
        try:
            handle = self._driver.connect(self._uri, self._timeout)
        except (ConnectError, OperationTimeoutError):
            raise
        except Exception as exc:
            raise ConnectError(f"Failed to connect to {self._uri}: {exc}") from exc
        logger.info("Connected to %s", self._uri)
        return handle

    def _disconnect_quietly(self, handle: Any) -> None:
        try:
            self._driver.disconnect(handle, self._timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to close discarded connection: %s", exc)
