from __future__ import annotations

import grpc
import pytest
from grpc_reflection.v1alpha import reflection_pb2, reflection_pb2_grpc
from sqlalchemy import text

from taskdesk.db import Store
from taskdesk.models import Task
from taskdesk.repositories import InMemoryTaskRepository, InMemoryUserRepository
from taskdesk.rpc import create_rpc_server, task_pb2, task_pb2_grpc, user_pb2

pytestmark = pytest.mark.asyncio


async def test_task_service_round(task_stub) -> None:
    created = await task_stub.CreateTask(
        task_pb2.CreateTaskRequest(title="Learn Rust", description="Study tonic")
    )
    assert created == task_pb2.Task(id=1, title="Learn Rust", description="Study tonic", completed=False)

    assert await task_stub.GetTask(task_pb2.GetTaskRequest(id=created.id)) == created

    updated = await task_stub.UpdateTask(task_pb2.UpdateTaskRequest(id=created.id, completed=True))
    assert updated.completed is True
    assert (updated.title, updated.description) == ("Learn Rust", "Study tonic")

    listed = await task_stub.ListTasks(task_pb2.ListTasksRequest())
    assert list(listed.tasks) == [updated]

    deleted = await task_stub.DeleteTask(task_pb2.DeleteTaskRequest(id=created.id))
    assert deleted.success is True


async def test_unset_optional_fields_keep_stored_values(task_stub) -> None:
    created = await task_stub.CreateTask(task_pb2.CreateTaskRequest(title="Keep", description="me"))

    assert await task_stub.UpdateTask(task_pb2.UpdateTaskRequest(id=created.id)) == created

    # an explicitly empty string is a value, not an omission
    cleared = await task_stub.UpdateTask(task_pb2.UpdateTaskRequest(id=created.id, description=""))
    assert cleared.description == ""
    assert cleared.title == "Keep"


async def test_missing_task_answers_not_found(task_stub) -> None:
    with pytest.raises(grpc.aio.AioRpcError) as excinfo:
        await task_stub.GetTask(task_pb2.GetTaskRequest(id=77))
    assert excinfo.value.code() is grpc.StatusCode.NOT_FOUND
    assert excinfo.value.details() == "Task with id 77 not found."

    with pytest.raises(grpc.aio.AioRpcError) as excinfo:
        await task_stub.DeleteTask(task_pb2.DeleteTaskRequest(id=77))
    assert excinfo.value.code() is grpc.StatusCode.NOT_FOUND


async def test_undecodable_request_answers_invalid_argument(rpc_channel: grpc.aio.Channel) -> None:
    get_task = rpc_channel.unary_unary("/task.TaskService/GetTask")

    with pytest.raises(grpc.aio.AioRpcError) as excinfo:
        # a varint tag for field 1 with its value cut off
        await get_task(b"\x08")

    assert excinfo.value.code() is grpc.StatusCode.INVALID_ARGUMENT


async def test_user_service_duplicate_email(user_stub) -> None:
    john = await user_stub.CreateUser(user_pb2.CreateUserRequest(name="John", email="john@x.com"))

    with pytest.raises(grpc.aio.AioRpcError) as excinfo:
        await user_stub.CreateUser(user_pb2.CreateUserRequest(name="Jane", email="john@x.com"))
    assert excinfo.value.code() is grpc.StatusCode.ALREADY_EXISTS
    assert excinfo.value.details() == "User with this email already exists."

    listed = await user_stub.ListUsers(user_pb2.ListUsersRequest())
    assert list(listed.users) == [john.user]


async def test_user_service_update_and_delete(user_stub) -> None:
    john = (await user_stub.CreateUser(user_pb2.CreateUserRequest(name="John", email="john@x.com"))).user

    renamed = (await user_stub.UpdateUser(user_pb2.UpdateUserRequest(id=john.id, name="Johnny"))).user
    assert (renamed.id, renamed.name, renamed.email) == (john.id, "Johnny", "john@x.com")
    assert (await user_stub.GetUser(user_pb2.GetUserRequest(id=john.id))).user == renamed

    deleted = await user_stub.DeleteUser(user_pb2.DeleteUserRequest(id=john.id))
    assert deleted.success is True
    with pytest.raises(grpc.aio.AioRpcError) as excinfo:
        await user_stub.DeleteUser(user_pb2.DeleteUserRequest(id=john.id))
    assert excinfo.value.code() is grpc.StatusCode.NOT_FOUND


async def test_store_failure_answers_internal(user_stub, store: Store) -> None:
    async with store.engine.begin() as connection:
        await connection.execute(text("DROP TABLE users"))

    with pytest.raises(grpc.aio.AioRpcError) as excinfo:
        await user_stub.ListUsers(user_pb2.ListUsersRequest(), metadata=(("x-request-id", "rpc-failure-1"),))

    assert excinfo.value.code() is grpc.StatusCode.INTERNAL
    assert excinfo.value.details() == "Internal server error."


async def test_reflection_lists_both_services(rpc_channel: grpc.aio.Channel) -> None:
    stub = reflection_pb2_grpc.ServerReflectionStub(rpc_channel)
    call = stub.ServerReflectionInfo(iter([reflection_pb2.ServerReflectionRequest(list_services="")]))

    responses = [response async for response in call]

    names = {service.name for service in responses[0].list_services_response.service}
    assert {"task.TaskService", "user.UserService"} <= names


class _BrokenTaskRepository(InMemoryTaskRepository):
    async def get(self, task_id: int) -> Task:
        raise ValueError("row could not be converted")


async def test_error_inside_method_answers_internal(recorded_logs) -> None:
    server, port = create_rpc_server(_BrokenTaskRepository(), InMemoryUserRepository(), address="127.0.0.1:0")
    await server.start()
    try:
        async with grpc.aio.insecure_channel(f"127.0.0.1:{port}") as channel:
            stub = task_pb2_grpc.TaskServiceStub(channel)
            with pytest.raises(grpc.aio.AioRpcError) as excinfo:
                await stub.GetTask(task_pb2.GetTaskRequest(id=1))
    finally:
        await server.stop(None)

    assert excinfo.value.code() is grpc.StatusCode.INTERNAL
    assert excinfo.value.details() == "Internal server error."
    assert "row could not be converted" not in excinfo.value.details()
    assert any(record.exc_info for record in recorded_logs)


async def test_rpc_logs_carry_call_context(task_stub, recorded_logs) -> None:
    with pytest.raises(grpc.aio.AioRpcError):
        await task_stub.GetTask(task_pb2.GetTaskRequest(id=5), metadata=(("x-request-id", "rpc-ctx-1"),))

    record = next(record for record in recorded_logs if record.name == "taskdesk.rpc.services")
    assert record.request_id == "rpc-ctx-1"
    assert record.transport == "grpc"
    assert record.operation == "/task.TaskService/GetTask"
