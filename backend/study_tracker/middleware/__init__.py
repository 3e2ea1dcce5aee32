"""
Middleware Package

Provides FastAPI middleware for:
- Rate limiting
- Error handling

Rate limiting usage:
    from study_tracker.middleware import limit_auth

    @limit_auth
    async def my_endpoint(request: Request):
        ...
"""

from study_tracker.middleware.error_handling import (
    AuthenticationError,
    ConflictError,
    ErrorHandlingMiddleware,
    NotFoundError,
    RateLimitError,
    ServiceError,
    StoreError,
    ValidationError,
    build_error_response,
    handle_endpoint_errors,
    setup_error_handling,
)
from study_tracker.middleware.rate_limit import (
    get_rate_limit,
    limit_auth,
    limiter,
    setup_rate_limiting,
)

__all__ = [
    "setup_rate_limiting",
    "limiter",
    "limit_auth",
    "get_rate_limit",
    "setup_error_handling",
    "handle_endpoint_errors",
    "build_error_response",
    "ErrorHandlingMiddleware",
    "ServiceError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "AuthenticationError",
    "StoreError",
    "RateLimitError",
]
