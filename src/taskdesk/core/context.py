"""Per-call context shared by the HTTP and RPC front-ends.

Each inbound call binds one ``CallContext`` for the duration of its
coroutine. Logging reads it back through ``RequestContextFilter`` so that
every record names the call it belongs to, whichever transport served it.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Literal

REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_ID_METADATA_KEY = "x-request-id"

Transport = Literal["http", "grpc", "-"]


@dataclass(frozen=True, slots=True)
class CallContext:
    request_id: str = "-"
    transport: Transport = "-"
    operation: str = "-"


_NO_CALL = CallContext()

_call_ctx_var: ContextVar[CallContext] = ContextVar("call_context", default=_NO_CALL)


def current_call() -> CallContext:
    """Return the context of the call being served, or a placeholder outside one."""

    return _call_ctx_var.get()


def bind_call(
    request_id: str,
    *,
    transport: Transport,
    operation: str,
) -> Token[CallContext]:
    """Bind the identity of an inbound call to the current execution context."""

    return _call_ctx_var.set(CallContext(request_id, transport, operation))


def reset_call(token: Token[CallContext]) -> None:
    _call_ctx_var.reset(token)


def generate_request_id() -> str:
    return str(uuid.uuid4())


__all__ = [
    "REQUEST_ID_HEADER",
    "REQUEST_ID_METADATA_KEY",
    "CallContext",
    "Transport",
    "bind_call",
    "current_call",
    "generate_request_id",
    "reset_call",
]
