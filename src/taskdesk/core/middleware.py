"""HTTP middleware binding the per-call context."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .context import REQUEST_ID_HEADER, bind_call, generate_request_id, reset_call


def http_operation(request: Request) -> str:
    """Name an HTTP call by its method and the route template it matched."""

    route = request.scope.get("route")
    path = getattr(route, "path_format", None) or request.url.path
    return f"{request.method} {path}"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Reuse or mint a request id, bind it for logging and echo it back."""

    def __init__(self, app, header_name: str = REQUEST_ID_HEADER):  # type: ignore[override]
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = request.headers.get(self._header_name) or generate_request_id()
        request.state.request_id = request_id
        token = bind_call(request_id, transport="http", operation=http_operation(request))
        try:
            response = await call_next(request)
        finally:
            reset_call(token)
        response.headers.setdefault(self._header_name, request_id)
        return response


__all__ = ["CorrelationIdMiddleware", "http_operation"]
