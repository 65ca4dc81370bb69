"""Domain exceptions and the FastAPI handlers that turn them into responses.

Business operations raise these instead of ``HTTPException`` so they can be
called outside a request (scripts, tests). Every handler answers with the
same ``{"detail": ...}`` body FastAPI uses for ``HTTPException``.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


class DomainError(Exception):
    """Base class for expected business errors."""

    status_code: int = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    status_code = 404


class ValidationFailedError(DomainError):
    """Malformed input or a violated precondition."""

    status_code = 400


class InsufficientStockError(ValidationFailedError):
    def __init__(self, product_id: int, product_name: Optional[str] = None):
        self.product_id = product_id
        self.product_name = product_name
        label = product_name or f"ID {product_id}"
        super().__init__(f"Insufficient stock for product {label}")


class OrderStateError(ValidationFailedError):
    """The order's current status does not allow the requested change."""


class AuthorizationError(DomainError):
    status_code = 403


class ConflictError(DomainError):
    status_code = 409


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    logger.info(
        "Domain error on %s %s: %s", request.method, request.url.path, exc.message
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"detail": "Internal server error"}
    if not get_settings().is_production:
        content["error"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=500, content=content)


def add_exception_handlers(app: FastAPI) -> None:
    """Register the domain and catch-all handlers on ``app``."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
