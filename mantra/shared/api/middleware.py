"""
Shared API Middleware
======================

Request tracing middleware and the exception handlers that turn the
application exception hierarchy into JSON error responses.
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from mantra.core import ApplicationException
from mantra.shared.infrastructure.logging import get_context_logger

CORRELATION_HEADER = "X-Correlation-ID"


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "unknown")


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with a correlation id and echoes it back.

    An id sent by the gateway is reused; otherwise one is generated.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with the acting user and its handling time.

    The handling time is also returned in the ``X-Response-Time`` header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        log = get_context_logger(__name__, _correlation_id(request))
        context = {
            "method": request.method,
            "path": request.url.path,
            "user_id": request.headers.get("X-User-Id"),
            "user_role": request.headers.get("X-User-Role"),
        }
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            log.error("Request failed", extra={
                **context,
                "error": str(e),
                "response_time_ms": int((time.perf_counter() - start) * 1000),
            })
            raise

        elapsed = time.perf_counter() - start
        response.headers["X-Response-Time"] = f"{elapsed:.3f}s"
        log.info("Request completed", extra={
            **context,
            "status_code": response.status_code,
            "response_time_ms": int(elapsed * 1000),
        })
        return response


async def application_exception_handler(request: Request, exc: ApplicationException) -> JSONResponse:
    """Respond with the exception's status code, message and details."""
    correlation_id = _correlation_id(request)
    log = get_context_logger(__name__, correlation_id)
    (log.error if exc.status_code >= 500 else log.info)(
        "Request rejected",
        extra={
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error_message": exc.message,
            "status_code": exc.status_code,
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.message,
            "error_type": type(exc).__name__,
            "details": exc.details,
            "correlation_id": correlation_id,
        }
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler for exceptions outside the application hierarchy.

    The exception text is only included in development.
    """
    correlation_id = _correlation_id(request)
    get_context_logger(__name__, correlation_id).error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_type": type(exc).__name__,
            "error_message": str(exc),
        }
    )

    is_dev = getattr(getattr(request.app.state, "settings", None), "environment", None) == "development"
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "correlation_id": correlation_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "debug_info": str(exc) if is_dev else None,
        }
    )
