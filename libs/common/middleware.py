"""Request tracing middleware.

Every request gets an id (taken from ``X-Request-ID`` or generated), bound to
the logging context and echoed back on the response along with the time the
request took.
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

# Health checks and documentation traffic are not worth a log line.
QUIET_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request metadata for logging and time each request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        quiet = request.url.path in QUIET_PATHS
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled error while serving request",
                extra={
                    "extra_fields": {
                        "error": str(e),
                        "duration_ms": _elapsed_ms(started),
                    }
                },
            )
            raise
        else:
            duration_ms = _elapsed_ms(started)
            if not quiet:
                fields = {
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                    "client": request.client.host if request.client else None,
                }
                if response.status_code >= 500:
                    logger.error("Request failed", extra={"extra_fields": fields})
                elif response.status_code >= 400:
                    logger.warning("Request rejected", extra={"extra_fields": fields})
                else:
                    logger.info("Request served", extra={"extra_fields": fields})

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time-Ms"] = str(duration_ms)
            return response
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Install request tracing on ``app``. Logging must already be configured."""
    app.add_middleware(RequestContextMiddleware)
