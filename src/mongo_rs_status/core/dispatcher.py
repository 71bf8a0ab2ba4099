"""Request dispatcher — maps HTTP verbs to guarded status queries.

The dispatcher is transport-agnostic: it takes a method name and returns
a fully rendered :class:`~mongo_rs_status.core.models.HttpResponse`.
Socket handling, body draining and header writing live in
:mod:`mongo_rs_status.infra.http_server`.

Per request::

    Received -> (acquire) -> Executing -> (query) -> Encoding -> Responding -> Done
         \\____________________\\______________________\\__________> Failed

Errors keep the status code they carry
(:attr:`RsStatusError.status_code`), so a rejected verb answers 405 and
every cluster-side failure answers 500.
"""

from __future__ import annotations

import json
import logging
from http import HTTPStatus

from mongo_rs_status.core.encoder import ReplyEncoder
from mongo_rs_status.core.executor import ReplicaSetService
from mongo_rs_status.core.guard import ConnectionGuard
from mongo_rs_status.core.models import HttpResponse
from mongo_rs_status.exceptions import MethodNotAllowedError, RsStatusError

logger = logging.getLogger(__name__)

ALLOWED_METHODS: tuple[str, ...] = ("GET",)


class StatusDispatcher:
    """Serves replica-set status through a shared :class:`ConnectionGuard`.

    Parameters
    ----------
    guard:
        Guard owning the single upstream connection.
    service:
        Executor issuing the status command.
    encoder:
        Renders the reply body.
    """

    def __init__(
        self,
        guard: ConnectionGuard,
        service: ReplicaSetService,
        encoder: ReplyEncoder,
    ) -> None:
        self._guard: ConnectionGuard = guard
        self._service: ReplicaSetService = service
        self._encoder: ReplyEncoder = encoder

    def dispatch(self, method: str) -> HttpResponse:
        """Handle one request and return its response.

        Never raises for domain errors; they become error responses.
        """
        if method.upper() not in ALLOWED_METHODS:
            return error_response(
                MethodNotAllowedError(f"unsupported method {method}"),
                headers=(("Allow", ", ".join(ALLOWED_METHODS)),),
            )
        try:
            body = self._get()
        except RsStatusError as exc:
            logger.warning("GET failed: %s", exc)
            return error_response(exc)
        return HttpResponse(status=HTTPStatus.OK, body=body)

    def _get(self) -> bytes:
        with self._guard.lease() as handle:
            reply = self._service.query_status(handle)
        return self._encoder.encode(reply)


def error_response(
    exc: RsStatusError,
    *,
    headers: tuple[tuple[str, str], ...] = (),
) -> HttpResponse:
    """Render *exc* as a JSON error body with its own status code."""
    status = int(exc.status_code)
    payload = {
        "error": {
            "kind": type(exc).__name__,
            "message": str(exc),
            "status": status,
        },
    }
    body = json.dumps(payload, indent=2).encode("utf-8")
    return HttpResponse(status=status, body=body, headers=headers)
