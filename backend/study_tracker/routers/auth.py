"""
Auth API Router

Endpoints:
- POST /api/auth/createUser - Create an account
- POST /api/auth/loginUser - Exchange credentials for a bearer token
"""

from fastapi import APIRouter, Depends, Request

from study_tracker.dependencies import get_auth_service
from study_tracker.middleware.error_handling import handle_endpoint_errors
from study_tracker.middleware.rate_limit import limit_auth
from study_tracker.models.auth import CreateUserRequest, LoginRequest, TokenResponse
from study_tracker.models.base import StatusResponse
from study_tracker.services.auth_service import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/createUser", response_model=StatusResponse)
@limit_auth
@handle_endpoint_errors("Create user")
async def create_user(
    request: Request,
    body: CreateUserRequest,
    service: AuthService = Depends(get_auth_service),
) -> StatusResponse:
    """Create an account. Emails are unique and case-insensitive."""
    return await service.create_user(body)


@router.post("/loginUser", response_model=TokenResponse)
@limit_auth
@handle_endpoint_errors("Login")
async def login_user(
    request: Request,
    body: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Return a bearer token for valid credentials."""
    return await service.login(body)
