"""Custom exception hierarchy for mongo-rs-status.

All exceptions that cross layer boundaries must inherit from
:class:`RsStatusError`.  Raw driver exceptions (``pymongo``/``bson``)
must NEVER propagate beyond the infrastructure layer; they are caught
there and re-raised as a typed subclass defined here.

Every error carries an HTTP status code.  It defaults to
``500 Internal Server Error`` and is refined per subclass; the request
dispatcher reads it when rendering an error response.

Hierarchy
---------
RsStatusError                  500
├── ConfigurationError         400
├── DocumentSourceError        400
├── ParseError                 400
├── ConnectError               500
├── OperationTimeoutError      500
├── UpstreamError              500
├── EncodeError                500
├── MethodNotAllowedError      405
└── EnvironmentError           500
"""

from __future__ import annotations

from http import HTTPStatus


class RsStatusError(Exception):
    """Base exception for all mongo-rs-status errors.

    Every user-visible error condition maps to a subclass of this
    exception so that the CLI error boundary and the HTTP dispatcher can
    render a clean message without leaking stack traces.
    """

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    """Transport status reported when this error ends an HTTP request."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""
        if status_code is not None:
            self.status_code = int(status_code)


# --- User input ------------------------------------------------------------

class ConfigurationError(RsStatusError):
    """Raised when command-line flags or environment settings are invalid."""

    status_code = HTTPStatus.BAD_REQUEST


class DocumentSourceError(RsStatusError):
    """Raised when the initiation document cannot be read."""

    status_code = HTTPStatus.BAD_REQUEST


class ParseError(RsStatusError):
    """Raised when the initiation document is not valid extended JSON."""

    status_code = HTTPStatus.BAD_REQUEST


# --- Cluster communication -------------------------------------------------

class ConnectError(RsStatusError):
    """Raised when a connection to the cluster cannot be established."""


class OperationTimeoutError(RsStatusError):
    """Raised when a cluster operation exceeds its deadline."""


class UpstreamError(RsStatusError):
    """Raised when the cluster rejects an administrative command.

    ``code`` and ``code_name`` hold the server error code and its
    symbolic name (e.g. ``94`` / ``NotYetInitialized``) when known.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        code_name: str | None = None,
        hint: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint, status_code=status_code)
        self.code: int | None = code
        self.code_name: str | None = code_name


# --- Output ----------------------------------------------------------------

class EncodeError(RsStatusError):
    """Raised when a reply cannot be serialized."""


# --- Transport -------------------------------------------------------------

class MethodNotAllowedError(RsStatusError):
    """Raised for HTTP verbs the status endpoint does not serve."""

    status_code = HTTPStatus.METHOD_NOT_ALLOWED


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(RsStatusError):
    """Raised when a required runtime dependency is not available."""
