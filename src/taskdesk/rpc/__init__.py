"""gRPC front-end exposing the task and user services."""

from __future__ import annotations

from .errors import GRPC_STATUS_BY_KIND
from .proto import task_pb2, task_pb2_grpc, user_pb2, user_pb2_grpc
from .server import create_rpc_server
from .services import TaskRpcService, UserRpcService

__all__ = [
    "GRPC_STATUS_BY_KIND",
    "TaskRpcService",
    "UserRpcService",
    "create_rpc_server",
    "task_pb2",
    "task_pb2_grpc",
    "user_pb2",
    "user_pb2_grpc",
]
