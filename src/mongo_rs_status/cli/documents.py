"""Loading of the replica-set initiation document."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import BinaryIO

from mongo_rs_status.cli.console import console
from mongo_rs_status.config import STDIN_SOURCE
from mongo_rs_status.exceptions import DocumentSourceError


def read_initiation_document(source: str, *, stdin: BinaryIO | None = None) -> bytes:
    """Return the raw bytes of the document named by *source*.

    ``"-"`` reads standard input; anything else is a file path.  The
    bytes are returned unparsed.

    Raises
    ------
    DocumentSourceError
        When the file cannot be opened or the stream cannot be read.
    """
    if source == STDIN_SOURCE:
        console.print("reading replicaSet config document from stdin")
        stream = stdin if stdin is not None else sys.stdin.buffer
        try:
            return stream.read()
        except OSError as exc:
            raise DocumentSourceError(
                f"failed to read replicaSet config document: {exc}",
            ) from exc

    try:
        return Path(source).read_bytes()
    except OSError as exc:
        raise DocumentSourceError(
            f"failed to open replicaSet config document: {exc}",
            hint="Pass a readable file path, or '-' to read from stdin.",
        ) from exc
