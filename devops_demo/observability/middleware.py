from __future__ import annotations

import uuid
from time import perf_counter
from typing import Any, Callable

import structlog
from starlette.datastructures import MutableHeaders
from starlette.responses import JSONResponse

from devops_demo.models.schemas import ErrorResponse
from devops_demo.observability.logging import log_access
from devops_demo.observability.metrics import observe_http_request


def _route_label(scope: dict[str, Any]) -> str:
    """Matched route pattern, or the raw path when nothing matched."""

    route = scope.get("route")
    pattern = getattr(route, "path", None)
    if pattern:
        return str(pattern)
    return str(scope.get("path", ""))


class RequestContextMiddleware:
    """Adds request_id context, access logs, duration metrics, and the generic 500.

    Unhandled exceptions end here rather than in Starlette's server error layer,
    so the 500 still passes through the outer middleware (security headers).
    """

    def __init__(self, app: Callable[..., Any]) -> None:
        self.app = app

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = str(uuid.uuid4())

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=scope.get("path", ""),
            method=scope.get("method", "GET"),
        )

        start = perf_counter()
        status_code: int = 500
        content_length = "-"
        response_started = False

        async def send_wrapper(message: dict[str, Any]) -> None:
            nonlocal status_code, content_length, response_started

            if message.get("type") == "http.response.start":
                response_started = True
                status_code = int(message.get("status", 500))
                headers = MutableHeaders(scope=message)
                headers["X-Request-ID"] = request_id
                content_length = headers.get("content-length", "-")

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            structlog.get_logger("errors").exception("unhandled_exception")
            if response_started:
                raise
            response = JSONResponse(
                ErrorResponse(error="Internal Server Error").model_dump(),
                status_code=500,
            )
            await response(scope, receive, send_wrapper)
        finally:
            elapsed = perf_counter() - start

            # Record the sample before logging so a logging failure cannot lose it.
            observe_http_request(
                method=scope.get("method", "GET"),
                route=_route_label(scope),
                status_code=status_code,
                elapsed_seconds=elapsed,
            )
            log_access(
                scope=scope,
                status_code=status_code,
                content_length=content_length,
                elapsed_seconds=elapsed,
            )

            structlog.contextvars.clear_contextvars()
