"""gRPC servicers for ``task.TaskService`` and ``user.UserService``.

The servicers implement the generated base classes but register their own
handlers so that request decoding happens inside ``rpc_method``: a payload
that is not a valid message answers ``INVALID_ARGUMENT`` rather than the
transport's generic decoding failure.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable

import grpc
from google.protobuf.message import DecodeError, Message

from ..core.context import REQUEST_ID_METADATA_KEY, bind_call, generate_request_id, reset_call
from ..errors import NotFoundError, RepositoryError
from ..models import Task, User
from ..repositories import TaskRepository, UserRepository
from .errors import GRPC_STATUS_BY_KIND, INTERNAL_ERROR_MESSAGE
from .proto import TASK_SERVICE, USER_SERVICE, task_pb2, task_pb2_grpc, user_pb2, user_pb2_grpc

logger = logging.getLogger(__name__)


def _request_id_from(context: grpc.aio.ServicerContext) -> str:
    for key, value in context.invocation_metadata() or ():
        if key == REQUEST_ID_METADATA_KEY and value:
            return value if isinstance(value, str) else value.decode()
    return generate_request_id()


def _optional(message: Message, field: str) -> Any | None:
    return getattr(message, field) if message.HasField(field) else None


def rpc_method(request_type: type[Message]):
    """Decode the request, bind the call context and map failures to status codes.

    The wrapped coroutine receives the decoded request and returns a response
    message. ``RepositoryError`` is answered with the status code of its
    kind; anything else raised by the method is logged and answered as
    ``INTERNAL`` without exposing its text.
    """

    def decorator(
        method: Callable[[Any, Any], Awaitable[Message]],
    ) -> Callable[..., Awaitable[bytes]]:
        @functools.wraps(method)
        async def wrapper(self: RpcService, raw: bytes, context: grpc.aio.ServicerContext) -> bytes:
            operation = f"/{self.service_descriptor.full_name}/{method.__name__}"
            token = bind_call(_request_id_from(context), transport="grpc", operation=operation)
            try:
                try:
                    request = request_type.FromString(raw)
                except DecodeError:
                    logger.warning("RPC request could not be decoded")
                    await context.abort(
                        grpc.StatusCode.INVALID_ARGUMENT,
                        f"Request is not a valid {request_type.DESCRIPTOR.full_name} message.",
                    )

                try:
                    response = await method(self, request)
                except RepositoryError as exc:
                    logger.warning("RPC call failed", extra={"kind": exc.kind.value})
                    code, message = GRPC_STATUS_BY_KIND[exc.kind], exc.message
                except Exception:
                    logger.exception("Unhandled RPC error")
                    code, message = grpc.StatusCode.INTERNAL, INTERNAL_ERROR_MESSAGE
                else:
                    return response.SerializeToString()
                await context.abort(code, message)
            finally:
                reset_call(token)

        return wrapper

    return decorator


class RpcService:
    """Expose every method of ``service_descriptor`` as a raw-bytes unary handler."""

    service_descriptor: Any

    def generic_handler(self) -> grpc.GenericRpcHandler:
        handlers = {
            method.name: grpc.unary_unary_rpc_method_handler(getattr(self, method.name))
            for method in self.service_descriptor.methods
        }
        return grpc.method_handlers_generic_handler(self.service_descriptor.full_name, handlers)


def _task_message(task: Task) -> Message:
    return task_pb2.Task(
        id=task.id,
        title=task.title,
        description=task.description,
        completed=task.completed,
    )


def _user_message(user: User) -> Message:
    return user_pb2.User(id=user.id, name=user.name, email=user.email)


class TaskRpcService(RpcService, task_pb2_grpc.TaskServiceServicer):
    service_descriptor = TASK_SERVICE

    def __init__(self, tasks: TaskRepository) -> None:
        self._tasks = tasks

    @rpc_method(task_pb2.CreateTaskRequest)
    async def CreateTask(self, request):
        return _task_message(await self._tasks.create(request.title, request.description))

    @rpc_method(task_pb2.GetTaskRequest)
    async def GetTask(self, request):
        return _task_message(await self._tasks.get(request.id))

    @rpc_method(task_pb2.ListTasksRequest)
    async def ListTasks(self, request):
        tasks = await self._tasks.list()
        return task_pb2.ListTasksResponse(tasks=[_task_message(task) for task in tasks])

    @rpc_method(task_pb2.UpdateTaskRequest)
    async def UpdateTask(self, request):
        task = await self._tasks.update(
            request.id,
            title=_optional(request, "title"),
            description=_optional(request, "description"),
            completed=_optional(request, "completed"),
        )
        return _task_message(task)

    @rpc_method(task_pb2.DeleteTaskRequest)
    async def DeleteTask(self, request):
        if not await self._tasks.delete(request.id):
            raise NotFoundError("task", request.id)
        return task_pb2.DeleteTaskResponse(success=True)


class UserRpcService(RpcService, user_pb2_grpc.UserServiceServicer):
    service_descriptor = USER_SERVICE

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    @rpc_method(user_pb2.CreateUserRequest)
    async def CreateUser(self, request):
        user = await self._users.create(request.name, request.email)
        return user_pb2.CreateUserResponse(user=_user_message(user))

    @rpc_method(user_pb2.GetUserRequest)
    async def GetUser(self, request):
        return user_pb2.GetUserResponse(user=_user_message(await self._users.get(request.id)))

    @rpc_method(user_pb2.ListUsersRequest)
    async def ListUsers(self, request):
        users = await self._users.list()
        return user_pb2.ListUsersResponse(users=[_user_message(user) for user in users])

    @rpc_method(user_pb2.UpdateUserRequest)
    async def UpdateUser(self, request):
        user = await self._users.update(
            request.id,
            name=_optional(request, "name"),
            email=_optional(request, "email"),
        )
        return user_pb2.UpdateUserResponse(user=_user_message(user))

    @rpc_method(user_pb2.DeleteUserRequest)
    async def DeleteUser(self, request):
        if not await self._users.delete(request.id):
            raise NotFoundError("user", request.id)
        return user_pb2.DeleteUserResponse(success=True)


__all__ = ["RpcService", "TaskRpcService", "UserRpcService", "rpc_method"]
