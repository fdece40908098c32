"""
Middleware for request tracing, logging, caching headers and metrics.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging_config import clear_request_id, get_logger, set_request_id

logger = get_logger(__name__)


def route_template(request: Request) -> str:
    """
    Path template of the matched route, e.g. ``/cell/{cell_id}``.

    Falls back to the raw path when no route matched, so metric labels
    stay bounded for known routes.
    """
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request and response with timing and a request id.

    An incoming ``X-Request-ID`` header is reused; otherwise a new id is
    generated. The id is echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        start_time = time.perf_counter()

        logger.debug(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "client_host": request.client.host if request.client else None,
                }
            },
        )

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id

            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"[{response.status_code}] ({duration_ms:.2f}ms)",
                extra={
                    "extra_fields": {
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": response.status_code,
                        "duration_ms": round(duration_ms, 2),
                    }
                },
            )
            return response
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path} ({duration_ms:.2f}ms)",
                extra={"extra_fields": {"error": str(exc)}},
            )
            raise
        finally:
            clear_request_id()


class StaticFileCacheMiddleware(BaseHTTPMiddleware):
    """Adds Cache-Control headers to responses under /static/."""

    CACHE_DURATIONS = {
        ".css": 86400,
        ".js": 86400,
        ".png": 604800,
        ".svg": 604800,
        ".ico": 604800,
    }
    DEFAULT_DURATION = 3600

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        path = request.url.path
        if path.startswith("/static/"):
            duration = next(
                (
                    seconds
                    for ext, seconds in self.CACHE_DURATIONS.items()
                    if path.endswith(ext)
                ),
                self.DEFAULT_DURATION,
            )
            response.headers["Cache-Control"] = f"public, max-age={duration}"

        return response


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Tracks request count and duration for every HTTP request.

    Endpoints are labelled with the route template rather than the raw
    path, so cell ids do not multiply label values.
    """

    def __init__(self, app: ASGIApp, track_func: Callable):
        """
        Args:
            app: ASGI application
            track_func: Called with (method, endpoint, status_code, duration)
        """
        super().__init__(app)
        self.track_func = track_func

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        self.track_func(
            method=request.method,
            endpoint=route_template(request),
            status_code=response.status_code,
            duration=time.perf_counter() - start_time,
        )
        return response
