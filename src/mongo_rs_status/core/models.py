"""Domain models for mongo-rs-status.

All models are frozen dataclasses or enums: immutable values with no
behaviour beyond data access.  They carry no I/O and no dependency on the
driver.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Administrative reply
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AdminReply:
    """Reply document returned by one administrative command."""

    command: str
    """Name of the command that produced the reply (e.g. ``replSetGetStatus``)."""

    document: Mapping[str, Any]
    """Reply fields in the order the server sent them."""


# ---------------------------------------------------------------------------
# Connection guard state
# ---------------------------------------------------------------------------

class GuardState(enum.Enum):
    """Observable states of the connection guard's handle slot."""

    EMPTY = "empty"
    HOLDING = "holding"


# ---------------------------------------------------------------------------
# Transport-neutral response
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Fully rendered response produced by the request dispatcher.

    The body is complete before any byte is written, so concurrent
    requests never interleave output.
    """

    status: int
    body: bytes
    content_type: str = "application/json"
    headers: tuple[tuple[str, str], ...] = field(default=())
