"""Core layer — connection lifecycle, command execution and encoding.

Rules
-----
* No ``print()`` calls.
* No ``pymongo`` / ``bson`` imports; the driver arrives through
  :mod:`~mongo_rs_status.core.protocols`.
* No imports from ``cli`` or ``infra``.
"""

from mongo_rs_status.core.dispatcher import StatusDispatcher
from mongo_rs_status.core.encoder import ReplyEncoder
from mongo_rs_status.core.executor import ReplicaSetService
from mongo_rs_status.core.guard import ConnectionGuard
from mongo_rs_status.core.models import AdminReply, GuardState, HttpResponse
from mongo_rs_status.core.protocols import DocumentCodec, MongoDriver

__all__: list[str] = [
    "AdminReply",
    "ConnectionGuard",
    "DocumentCodec",
    "GuardState",
    "HttpResponse",
    "MongoDriver",
    "ReplicaSetService",
    "ReplyEncoder",
    "StatusDispatcher",
]
