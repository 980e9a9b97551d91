"""Entry point wiring the store, the HTTP API and the RPC server together."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import register_exception_handlers
from .api.routers import api_router, health_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .core.middleware import CorrelationIdMiddleware
from .db import Store, open_store
from .errors import StoreInitializationError
from .repositories import TaskRepository, UserRepository
from .rpc import create_rpc_server
from .schemas.system import RootResponse

logger = logging.getLogger(__name__)


def _normalise_prefix(raw_prefix: str) -> str:
    router_prefix = raw_prefix.strip()
    if router_prefix and not router_prefix.startswith("/"):
        router_prefix = f"/{router_prefix}"
    router_prefix = router_prefix.rstrip("/")
    if router_prefix == "/":
        router_prefix = ""
    return router_prefix


def create_app(
    settings: Settings | None = None,
    *,
    tasks: TaskRepository | None = None,
    users: UserRepository | None = None,
) -> FastAPI:
    """Instantiate and configure the FastAPI application.

    When both repositories are supplied they are used as-is and the caller
    owns the store. When neither is, the lifespan opens a store on startup
    and closes it on shutdown. Supplying only one is rejected.
    """

    if (tasks is None) != (users is None):
        raise ValueError("Pass both the task and user repositories, or neither.")

    settings = settings or get_settings()
    configure_logging(settings)
    owns_store = tasks is None

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        store: Store | None = None
        if owns_store:
            store = await open_store(settings)
            application.state.task_repository = store.tasks
            application.state.user_repository = store.users
        try:
            yield
        finally:
            if store is not None:
                await store.close()

    router_prefix = _normalise_prefix(settings.api_prefix)
    openapi_url = "/openapi.json" if not router_prefix else f"{router_prefix}/openapi.json"

    application = FastAPI(
        title=settings.project_name,
        version=settings.version,
        summary="Task and user CRUD service served over HTTP and gRPC.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=openapi_url,
        lifespan=lifespan,
    )

    application.state.settings = settings
    application.state.task_repository = tasks
    application.state.user_repository = users

    application.add_middleware(CorrelationIdMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    if router_prefix:
        application.include_router(api_router, prefix=router_prefix)
    else:
        application.include_router(api_router)
    application.include_router(health_router)

    @application.get("/", response_model=RootResponse, summary="Service metadata")
    async def read_root() -> RootResponse:
        """Expose minimal service metadata for API clients."""

        return RootResponse(
            name=settings.project_name,
            environment=settings.environment,
            version=settings.version,
            api_prefix=settings.api_prefix,
        )

    register_exception_handlers(application)
    return application


app = create_app()


async def serve(settings: Settings) -> None:
    """Run both front-ends on the current event loop against one store."""

    store = await open_store(settings)
    try:
        rpc_server, rpc_port = create_rpc_server(
            store.tasks,
            store.users,
            address=settings.rpc_address,
        )
        await rpc_server.start()
        logger.info("RPC server started", extra={"port": rpc_port})

        application = create_app(settings, tasks=store.tasks, users=store.users)
        http_server = uvicorn.Server(
            uvicorn.Config(
                application,
                host=settings.app_host,
                port=settings.app_port,
                log_config=None,
            )
        )
        try:
            await http_server.serve()
        finally:
            await rpc_server.stop(settings.rpc_shutdown_grace_seconds)
            logger.info("RPC server stopped")
    finally:
        await store.close()


def run() -> None:
    """Console entry point for ``taskdesk``."""

    settings = get_settings()
    configure_logging(settings)
    try:
        asyncio.run(serve(settings))
    except StoreInitializationError:
        logger.critical("Store initialisation failed; exiting")
        raise SystemExit(1) from None


__all__ = ["app", "create_app", "run", "serve"]
