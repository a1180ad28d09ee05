"""
TRIZEN CMS - HTTP Middleware
Request tracing, response hardening and body size limits
"""

import time
from typing import Callable, FrozenSet
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from starlette.types import ASGIApp

from app.core.exceptions import UploadTooLargeError, error_response
from app.core.logging_config import (
    logger,
    set_request_id,
    set_user_id,
    generate_request_id,
)


# Probes and docs are traced (request id header) but not logged
QUIET_PATHS: FrozenSet[str] = frozenset({
    "/",
    "/health",
    "/api/v1/health/live",
    "/api/v1/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
})


def is_quiet_path(path: str) -> bool:
    return path in QUIET_PATHS


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Assigns every request an id (honouring an incoming X-Request-ID),
    binds it to the logging context and logs the finished request with
    its status and duration. Catalog reads slower than SLOW_REQUEST_MS
    are additionally reported as slow.
    """

    SLOW_REQUEST_MS = 1000

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)

        method, path = request.method, request.url.path
        quiet = is_quiet_path(path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed = (time.perf_counter() - started) * 1000
            logger.log_error_with_context(
                exc,
                context=f"{method} {path}",
                http_method=method,
                http_path=path,
                duration_ms=elapsed,
            )
            raise
        finally:
            set_user_id("")

        elapsed = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{elapsed:.2f}ms"

        if not quiet:
            client_ip = request.client.host if request.client else "unknown"
            logger.log_request(method, path, response.status_code, elapsed, client_ip=client_ip)
            if elapsed > self.SLOW_REQUEST_MS:
                logger.warning(
                    f"Slow request: {method} {path} took {elapsed:.2f}ms",
                    extra={"event_type": "slow_request", "http_path": path, "duration_ms": elapsed},
                )

        set_request_id("")
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds browser hardening headers to every response"""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests whose declared Content-Length exceeds max_size.

    CSV uploads have their own tighter limit enforced by the bulk upload
    endpoint; this is the global ceiling.
    """

    def __init__(self, app: ASGIApp, max_size: int):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")

        if declared.isdigit() and int(declared) > self.max_size:
            error = UploadTooLargeError(int(declared), self.max_size)
            logger.warning(
                f"Rejected {request.method} {request.url.path}: {declared} bytes exceeds {self.max_size}",
                extra={"event_type": "request_too_large", "error_code": error.code},
            )
            return JSONResponse(status_code=error.status_code, content=error_response(error))

        return await call_next(request)


__all__ = [
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
    "RequestSizeLimitMiddleware",
    "is_quiet_path",
    "QUIET_PATHS",
]
