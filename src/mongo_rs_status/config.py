"""Runtime settings — resolution and validation.

Flag values and the environment are folded into a single frozen
:class:`Settings` object at startup.  Nothing downstream reads the
environment or re-validates values; a :class:`Settings` instance is
always valid.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from mongo_rs_status.exceptions import ConfigurationError

DEFAULT_PORT: int = 20000
DEFAULT_TIMEOUT_SECONDS: int = 10
DEFAULT_ADMIN_DB: str = "admin"
DEFAULT_URI: str = "mongodb://localhost:27017"

URI_ENV_VAR: str = "MONGODB_URI"
"""Environment variable consulted when ``--uri`` is not given."""

MIN_TIMEOUT_SECONDS: int = 1
MAX_TIMEOUT_SECONDS: int = 1800
MIN_PORT: int = 1025
MAX_PORT: int = 65535

LISTENER_TIMEOUT_FACTOR: int = 3
"""HTTP socket timeouts are this multiple of the per-operation timeout."""

STDIN_SOURCE: str = "-"
"""``--initiate`` value that selects standard input."""


@dataclass(frozen=True, slots=True)
class Settings:
    """Validated configuration shared by the one-shot and serve paths."""

    uri: str
    timeout: float
    """Per-operation timeout in seconds."""

    admin_db: str
    initiate: str | None = None
    """Path of the initiation document, ``"-"`` for stdin, or ``None``."""

    serve: bool = False
    port: int = DEFAULT_PORT

    @property
    def listener_timeout(self) -> float:
        """Read/write/idle timeout applied to HTTP sockets."""
        return self.timeout * LISTENER_TIMEOUT_FACTOR


def resolve_uri(flag_value: str | None, environ: Mapping[str, str] | None = None) -> str:
    """Return the flag value, else ``$MONGODB_URI``, else the local default."""
    if flag_value:
        return flag_value
    env = os.environ if environ is None else environ
    return env.get(URI_ENV_VAR) or DEFAULT_URI


def load_settings(
    *,
    uri: str | None = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
    admin_db: str = DEFAULT_ADMIN_DB,
    initiate: str | None = None,
    serve: bool = False,
    port: int = DEFAULT_PORT,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Validate raw option values and build a :class:`Settings`.

    Raises
    ------
    ConfigurationError
        When the timeout or port is out of range, or the admin database
        name is empty.
    """
    if not MIN_TIMEOUT_SECONDS <= timeout <= MAX_TIMEOUT_SECONDS:
        raise ConfigurationError(
            f"Invalid timeout: {timeout}",
            hint=(
                f"Allowed timeout values are between {MIN_TIMEOUT_SECONDS} "
                f"and {MAX_TIMEOUT_SECONDS} seconds."
            ),
        )
    if not admin_db:
        raise ConfigurationError("admindb name must not be empty.")
    if not MIN_PORT <= port <= MAX_PORT:
        raise ConfigurationError(
            f"Invalid port: {port}",
            hint=f"Allowed port values are between {MIN_PORT} and {MAX_PORT}.",
        )

    return Settings(
        uri=resolve_uri(uri, environ),
        timeout=float(timeout),
        admin_db=admin_db,
        initiate=initiate or None,
        serve=serve,
        port=port,
    )
