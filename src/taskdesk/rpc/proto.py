"""Message and service modules compiled from the bundled ``.proto`` files.

``grpc.protos_and_services`` compiles each file with grpcio-tools on first
import and caches the generated ``*_pb2``/``*_pb2_grpc`` modules in
``sys.modules``. Paths are resolved against ``sys.path``, which holds the
directory containing the ``taskdesk`` package.
"""

from __future__ import annotations

import grpc

TASK_PROTO = "taskdesk/rpc/protos/task.proto"
USER_PROTO = "taskdesk/rpc/protos/user.proto"

task_pb2, task_pb2_grpc = grpc.protos_and_services(TASK_PROTO)
user_pb2, user_pb2_grpc = grpc.protos_and_services(USER_PROTO)

TASK_SERVICE = task_pb2.DESCRIPTOR.services_by_name["TaskService"]
USER_SERVICE = user_pb2.DESCRIPTOR.services_by_name["UserService"]

__all__ = [
    "TASK_SERVICE",
    "USER_SERVICE",
    "task_pb2",
    "task_pb2_grpc",
    "user_pb2",
    "user_pb2_grpc",
]
