"""
Rate Limiting

Throttles every route per client with SlowAPI, with a stricter limit on
sign-up and login. Limits come from settings (RATE_LIMIT_DEFAULT,
RATE_LIMIT_AUTH) and the whole feature is switched off with
RATE_LIMIT_ENABLED=false.

Usage:
    from study_tracker.middleware.rate_limit import limit_auth

    @router.post("/loginUser")
    @limit_auth
    async def login_user(request: Request, ...):
        ...

Rejected requests get a 429 in the same JSON shape as every other error.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from study_tracker.config import Settings, settings
from study_tracker.enums import RateLimitType
from study_tracker.middleware.error_handling import RateLimitError, build_error_response

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """
    Key requests by client address.

    Behind a proxy the left-most X-Forwarded-For entry is the client.
    """
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    client = forwarded_for.split(",")[0].strip()
    return client or get_remote_address(request)


def build_limiter(config: Settings = settings) -> Limiter:
    """
    Limiter keyed by client address.

    Every route gets RATE_LIMIT_DEFAULT; sign-up and login add the stricter
    RATE_LIMIT_AUTH through ``limit_auth``.
    """
    return Limiter(
        key_func=get_client_identifier,
        default_limits=[config.get_rate_limit(RateLimitType.DEFAULT)],
        enabled=config.RATE_LIMIT_ENABLED,
    )


limiter = build_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a SlowAPI rejection as a RateLimitError response."""
    error = RateLimitError(
        "Too many requests, try again later",
        details={"limit": str(exc.detail)},
    )
    logger.warning(
        f"Rate limit hit by {get_client_identifier(request)} on {request.url.path}"
    )
    return build_error_response(
        error.status_code, error.error_code, error.message, error.details
    )


def setup_rate_limiting(app: FastAPI, enabled: bool = True) -> None:
    """
    Attach the limiter to the app.

    Args:
        app: FastAPI application instance
        enabled: Skip all wiring when False
    """
    if not enabled:
        logger.info("Rate limiting disabled")
        return

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    logger.info(f"Rate limiting enabled (auth: {get_rate_limit(RateLimitType.AUTH)})")


def get_rate_limit(rate_limit_type: RateLimitType) -> str:
    """Limit string (e.g. "10/minute") configured for an endpoint class."""
    return settings.get_rate_limit(rate_limit_type)


def limit_auth(func):
    """Apply the sign-up/login limit to an endpoint taking ``request``."""
    return limiter.limit(get_rate_limit(RateLimitType.AUTH))(func)
