"""Construction of the asyncio gRPC server."""

from __future__ import annotations

import logging

import grpc
from grpc_reflection.v1alpha import reflection

from ..repositories import TaskRepository, UserRepository
from .services import TaskRpcService, UserRpcService

logger = logging.getLogger(__name__)


def create_rpc_server(
    tasks: TaskRepository,
    users: UserRepository,
    *,
    address: str,
) -> tuple[grpc.aio.Server, int]:
    """Build an unstarted server exposing both services and server reflection.

    Returns the server together with the bound port, which differs from the
    requested one when ``address`` ends in ``:0``.
    """

    services = (TaskRpcService(tasks), UserRpcService(users))
    server = grpc.aio.server()
    server.add_generic_rpc_handlers(tuple(service.generic_handler() for service in services))

    service_names = tuple(service.service_descriptor.full_name for service in services)
    reflection.enable_server_reflection((*service_names, reflection.SERVICE_NAME), server)

    port = server.add_insecure_port(address)
    if port == 0:
        raise RuntimeError(f"Unable to bind RPC server to {address!r}.")
    logger.info("RPC server bound", extra={"address": address, "port": port, "services": service_names})
    return server, port


__all__ = ["create_rpc_server"]
