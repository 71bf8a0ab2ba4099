"""Infrastructure layer — external system integration.

This layer wraps all interaction with pymongo, the ``bson`` codec and the
HTTP socket server.  Every raw third-party exception must be caught here
and re-raised as a :class:`~mongo_rs_status.exceptions.RsStatusError`
subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from mongo_rs_status.infra.extjson_codec import ExtendedJsonCodec
from mongo_rs_status.infra.http_server import StatusHTTPServer, run_server
from mongo_rs_status.infra.pymongo_driver import PyMongoDriver

__all__: list[str] = [
    "ExtendedJsonCodec",
    "PyMongoDriver",
    "StatusHTTPServer",
    "run_server",
]
