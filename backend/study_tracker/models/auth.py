"""
Authentication API Models (Pydantic)

Request/response schemas for account creation and login.
"""

from pydantic import EmailStr, Field

from study_tracker.models.base import StrictRequest, StrictResponse


class CreateUserRequest(StrictRequest):
    """Sign-up payload."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginRequest(StrictRequest):
    """Login payload."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(StrictResponse):
    """Bearer token returned on successful login."""

    token: str
