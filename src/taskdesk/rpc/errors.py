"""Status codes used when RPC calls fail."""

from __future__ import annotations

import grpc

from ..errors import ErrorKind

GRPC_STATUS_BY_KIND: dict[ErrorKind, grpc.StatusCode] = {
    ErrorKind.NOT_FOUND: grpc.StatusCode.NOT_FOUND,
    ErrorKind.CONFLICT: grpc.StatusCode.ALREADY_EXISTS,
    ErrorKind.INVALID: grpc.StatusCode.INVALID_ARGUMENT,
    ErrorKind.INTERNAL: grpc.StatusCode.INTERNAL,
}

INTERNAL_ERROR_MESSAGE = "Internal server error."

__all__ = ["GRPC_STATUS_BY_KIND", "INTERNAL_ERROR_MESSAGE"]
