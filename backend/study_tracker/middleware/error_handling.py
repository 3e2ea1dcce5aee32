"""
Error Handling

Maps service-layer failures to one JSON error shape:

    {"error": "not_found", "message": "Subject not found",
     "error_id": "3f9c2a1b", "details": {...}, "timestamp": "..."}

Pieces:
- ServiceError and its subclasses, raised by services and dependencies
- ErrorHandlingMiddleware, which renders them (and sanitizes anything else)
- handle_endpoint_errors, an endpoint decorator that turns store failures
  into StoreError and unexpected bugs into a 500

Usage:
    from study_tracker.middleware.error_handling import NotFoundError

    if subject is None:
        raise NotFoundError("Subject not found", details={"subject_id": str(subject_id)})
"""

import functools
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, TypeVar
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Body of every error returned by the API."""

    error: str  # Machine-readable code, e.g. "validation_error"
    message: str
    error_id: str  # Correlates the response with the log line
    details: Optional[dict] = None
    timestamp: datetime


def new_error_id() -> str:
    """Short correlation id for an error response."""
    return uuid4().hex[:8]


def build_error_response(
    status_code: int,
    error_code: str,
    message: str,
    details: Optional[dict] = None,
    error_id: Optional[str] = None,
) -> JSONResponse:
    """Render an ErrorResponse body with the given status."""
    body = ErrorResponse(
        error=error_code,
        message=message,
        error_id=error_id or new_error_id(),
        details=details,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


# =============================================================================
# Service Exceptions
# =============================================================================


class ServiceError(Exception):
    """
    Base class for failures the API reports to clients.

    Subclasses fix ``status_code`` and ``error_code``; both can also be
    overridden per instance.

    Example:
        raise ServiceError("Study goal service unavailable", status_code=503)
    """

    status_code: int = 500
    error_code: str = "service_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        if error_code:
            self.error_code = error_code
        self.details = details


class ValidationError(ServiceError):
    """
    Input the request schema accepts but the domain does not.

    Examples: a subtopic index outside the chapter, or a completed
    subtopic being marked incomplete.
    """

    status_code = 422
    error_code = "validation_error"


class NotFoundError(ServiceError):
    """User or subject missing, or owned by someone else."""

    status_code = 404
    error_code = "not_found"


class ConflictError(ServiceError):
    """A unique value (e.g. an email) is already taken."""

    status_code = 409
    error_code = "conflict"


class AuthenticationError(ServiceError):
    """Bad credentials or a missing, invalid or expired bearer token."""

    status_code = 401
    error_code = "unauthorized"


class StoreError(ServiceError):
    """
    The database rejected or failed an operation.

    Not retried by the service layer.
    """

    status_code = 503
    error_code = "store_error"


class RateLimitError(ServiceError):
    """Too many sign-up or login attempts from one client."""

    status_code = 429
    error_code = "rate_limit_exceeded"


# =============================================================================
# Middleware
# =============================================================================


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Render ServiceErrors and hide everything else behind a generic 500.

    Client errors are logged at WARNING, server-side failures at ERROR
    with the traceback. With ``debug`` the 500 body also carries the
    exception and traceback.
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        error_id = new_error_id()

        try:
            return await call_next(request)

        except HTTPException:
            # FastAPI's own handler renders these
            raise

        except ServiceError as e:
            log = logger.warning if e.status_code < 500 else logger.error
            log(
                f"[{error_id}] {request.method} {request.url.path} -> "
                f"{e.status_code} {e.error_code}: {e.message}",
                extra={"error_id": error_id, "details": e.details},
            )
            return build_error_response(
                e.status_code, e.error_code, e.message, e.details, error_id
            )

        except Exception as e:
            trace = traceback.format_exc()
            logger.error(
                f"[{error_id}] {request.method} {request.url.path} -> "
                f"unhandled {type(e).__name__}: {e}",
                extra={"error_id": error_id, "traceback": trace},
            )

            details = None
            if self.debug:
                details = {
                    "exception": type(e).__name__,
                    "message": str(e),
                    "traceback": trace,
                }
            return build_error_response(
                500,
                "internal_server_error",
                "An unexpected error occurred",
                details,
                error_id,
            )


def setup_error_handling(app: FastAPI, debug: bool = False) -> None:
    """
    Install ErrorHandlingMiddleware on the app.

    Args:
        app: FastAPI application instance
        debug: Include exception details in 500 responses
    """
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    logger.info(f"Error handling middleware enabled (debug={debug})")


# =============================================================================
# Endpoint Decorator
# =============================================================================


def handle_endpoint_errors(
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Translate failures escaping an async endpoint.

    - HTTPException and ServiceError are re-raised untouched
    - SQLAlchemyError becomes StoreError (503)
    - Anything else is logged with its traceback and becomes a 500
      HTTPException naming the operation

    Usage:
        @router.get("/streak")
        @handle_endpoint_errors("Get streak")
        async def get_streak(...):
            ...

    Args:
        operation: Human-readable operation name for logs and messages.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except (HTTPException, ServiceError):
                raise
            except SQLAlchemyError as e:
                logger.error(f"{operation} failed in the store: {e}")
                raise StoreError(f"{operation} failed: storage unavailable") from e
            except Exception as e:
                logger.exception(f"{operation} failed: {type(e).__name__}: {e}")
                raise HTTPException(
                    status_code=500, detail=f"{operation} failed"
                ) from e

        return wrapper

    return decorator
