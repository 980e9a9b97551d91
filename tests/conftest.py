from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import grpc
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from taskdesk.core.config import Settings
from taskdesk.core.logging import RequestContextFilter
from taskdesk.db import Store, open_store
from taskdesk.main import create_app
from taskdesk.repositories import (
    InMemoryTaskRepository,
    InMemoryUserRepository,
    TaskRepository,
    UserRepository,
)
from taskdesk.rpc import create_rpc_server, task_pb2_grpc, user_pb2_grpc


@pytest.fixture()
def database_path(tmp_path: Path) -> Path:
    return tmp_path / "tasks.db"


@pytest.fixture()
def settings(database_path: Path) -> Settings:
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{database_path}",
        db_pool_timeout=5.0,
    )


@pytest_asyncio.fixture
async def store(settings: Settings) -> AsyncIterator[Store]:
    opened = await open_store(settings)
    try:
        yield opened
    finally:
        await opened.close()


@pytest_asyncio.fixture(params=["sql", "memory"])
async def task_repository(request, settings: Settings) -> AsyncIterator[TaskRepository]:
    if request.param == "memory":
        yield InMemoryTaskRepository()
        return
    opened = await open_store(settings)
    try:
        yield opened.tasks
    finally:
        await opened.close()


@pytest_asyncio.fixture(params=["sql", "memory"])
async def user_repository(request, settings: Settings) -> AsyncIterator[UserRepository]:
    if request.param == "memory":
        yield InMemoryUserRepository()
        return
    opened = await open_store(settings)
    try:
        yield opened.users
    finally:
        await opened.close()


@pytest.fixture()
def app(settings: Settings, store: Store) -> FastAPI:
    return create_app(settings, tasks=store.tasks, users=store.users)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest_asyncio.fixture
async def rpc_channel(store: Store) -> AsyncIterator[grpc.aio.Channel]:
    server, port = create_rpc_server(store.tasks, store.users, address="127.0.0.1:0")
    await server.start()
    try:
        async with grpc.aio.insecure_channel(f"127.0.0.1:{port}") as channel:
            yield channel
    finally:
        await server.stop(None)


@pytest.fixture()
def task_stub(rpc_channel: grpc.aio.Channel):
    return task_pb2_grpc.TaskServiceStub(rpc_channel)


@pytest.fixture()
def user_stub(rpc_channel: grpc.aio.Channel):
    return user_pb2_grpc.UserServiceStub(rpc_channel)


class RecordingHandler(logging.Handler):
    """Keep records in memory after stamping them with the current call."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []
        self.addFilter(RequestContextFilter())

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture()
def recorded_logs() -> Iterator[list[logging.LogRecord]]:
    handler = RecordingHandler()
    package_logger = logging.getLogger("taskdesk")
    package_logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        package_logger.removeHandler(handler)
