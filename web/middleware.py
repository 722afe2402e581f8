"""
FastAPI middleware for observability.

Provides:
- Request correlation ID injection
- Request/response logging with timing metrics
- Request timeout protection
"""
import asyncio
import time
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse

from core.observability import (
    get_logger,
    generate_correlation_id,
    set_correlation_id,
    get_correlation_id,
    metrics,
)

logger = get_logger(__name__)

# Metric endpoints answer within the Mongo server selection timeout (10s)
DEFAULT_REQUEST_TIMEOUT = 30.0

# Polled by the host platform; neither logged nor timed out
QUIET_PATHS = frozenset({"/api/health", "/health", "/"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with a correlation ID (``X-Request-ID`` or a fresh one),
    logs it with its filter query string and duration, and counts it in the
    in-memory metrics.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Request-ID") or generate_correlation_id()
        set_correlation_id(correlation_id)

        endpoint = f"{request.method} {request.url.path}"
        quiet = request.url.path in QUIET_PATHS
        started = time.perf_counter()

        if not quiet:
            logger.info(
                f"→ {endpoint}",
                extra={
                    "client_ip": request.client.host if request.client else "unknown",
                    "filters": dict(request.query_params) or None,
                }
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"✗ {endpoint}",
                extra={"duration_ms": _elapsed_ms(started), "error": str(e)}
            )
            metrics.record_error(type(e).__name__)
            raise

        duration_ms = _elapsed_ms(started)
        response.headers["X-Request-ID"] = correlation_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        status = response.status_code
        if not quiet:
            log = logger.warning if status >= 400 else logger.info
            log(f"← {endpoint} {status}", extra={"status_code": status, "duration_ms": duration_ms})

        metrics.record_request(endpoint)
        metrics.record_timing(endpoint, duration_ms)
        if status >= 400:
            metrics.record_error(f"HTTP_{status}")

        return response


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """
    Cancels requests running longer than ``timeout`` seconds and answers
    504 with the usual ``{"error": ...}`` body.
    """

    def __init__(self, app, timeout: float = DEFAULT_REQUEST_TIMEOUT):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        try:
            return await asyncio.wait_for(call_next(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Request timeout: {request.method} {path}",
                extra={"timeout": self.timeout}
            )
            metrics.record_error("REQUEST_TIMEOUT")
            return JSONResponse(
                status_code=504,
                content={
                    "error": "Request Timeout",
                    "detail": f"Request exceeded {self.timeout}s timeout",
                    "path": path,
                    "correlation_id": get_correlation_id(),
                }
            )
