"""Extended-JSON codec backed by :mod:`bson.json_util`.

Implements :class:`~mongo_rs_status.core.protocols.DocumentCodec`.
Parsing accepts both canonical and relaxed extended JSON; rendering
produces relaxed extended JSON with two-space indentation and keys in
document order.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import ModuleType
from typing import Any

from mongo_rs_status.exceptions import EncodeError, EnvironmentError, ParseError

INDENT: int = 2


def _import_json_util() -> ModuleType:
    """Return ``bson.json_util`` or raise :class:`EnvironmentError`."""
    try:
        from bson import json_util
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "pymongo is not installed. Install with: pip install pymongo",
        ) from exc
    return json_util


class ExtendedJsonCodec:
    """Concrete :class:`DocumentCodec` using the ``bson`` package shipped with pymongo."""

    def loads(self, raw: bytes) -> dict[str, Any]:
        """Parse *raw* into a document.

        Raises
        ------
        ParseError
            When *raw* is not UTF-8, not valid extended JSON, or not a
            JSON object.
        """
        json_util = _import_json_util()
        from bson.errors import BSONError

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"document is not valid UTF-8: {exc}") from exc
        if not text.strip():
            raise ParseError("document is empty")

        try:
            document = json_util.loads(text)
        except (ValueError, TypeError, BSONError) as exc:
            raise ParseError(
                f"invalid extended JSON: {exc}",
                hint="The replica-set config must be a JSON object, e.g. "
                '{"_id": "rs0", "members": [{"_id": 0, "host": "localhost:27017"}]}',
            ) from exc

        if not isinstance(document, dict):
            raise ParseError(
                f"document must be a JSON object, got {type(document).__name__}",
            )
        return document

    def dumps(self, document: Mapping[str, Any]) -> str:
        """Render *document* as indented relaxed extended JSON.

        Raises
        ------
        EncodeError
            When *document* holds values with no extended-JSON form.
        """
        json_util = _import_json_util()
        try:
            return json_util.dumps(
                document,
                json_options=json_util.RELAXED_JSON_OPTIONS,
                indent=INDENT,
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as exc:
            raise EncodeError(f"cannot render document: {exc}") from exc
