"""Result encoder — renders an :class:`AdminReply` as indented text.

The rendering itself is delegated to the injected
:class:`~mongo_rs_status.core.protocols.DocumentCodec`; this module only
extracts the raw document and guarantees that nothing but
:class:`~mongo_rs_status.exceptions.EncodeError` escapes.
"""

from __future__ import annotations

from collections.abc import Mapping

from mongo_rs_status.core.models import AdminReply
from mongo_rs_status.core.protocols import DocumentCodec
from mongo_rs_status.exceptions import EncodeError


class ReplyEncoder:
    """Serializes replies to UTF-8 relaxed extended JSON."""

    def __init__(self, codec: DocumentCodec) -> None:
        self._codec: DocumentCodec = codec

    def encode(self, reply: AdminReply) -> bytes:
        """Return *reply* as indented JSON bytes, fields in server order.

        Raises
        ------
        EncodeError
            When the reply holds no document or the codec cannot render it.
        """
        document = reply.document
        if not isinstance(document, Mapping):
            raise EncodeError(
                f"{reply.command}: reply is not a document "
                f"(got {type(document).__name__})",
            )
        try:
            text = self._codec.dumps(document)
        except EncodeError:
            raise
        except Exception as exc:
            raise EncodeError(f"{reply.command}: cannot serialize reply: {exc}") from exc
        return text.encode("utf-8")
