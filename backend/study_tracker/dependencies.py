"""
FastAPI Dependencies

Common dependencies for authentication and service construction.
"""

from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.db.base import get_db
from study_tracker.db.models import User
from study_tracker.middleware.error_handling import AuthenticationError
from study_tracker.services.auth_service import AuthService, decode_access_token
from study_tracker.services.study import (
    StreakTrackingService,
    SubjectService,
    TimeTrackingService,
)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> UUID:
    """
    Resolve the authenticated user from the ``Authorization: Bearer`` header.

    Returns:
        UUID: Id of an existing user.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid, expired,
            or belongs to a user that no longer exists.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    user_id = decode_access_token(credentials.credentials)
    if await db.get(User, user_id) is None:
        raise AuthenticationError("Invalid or expired token")
    return user_id


# ===========================================
# Service Providers
# ===========================================


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    """Get auth service."""
    return AuthService(db)


async def get_time_tracking_service(
    db: AsyncSession = Depends(get_db),
) -> TimeTrackingService:
    """Get time tracking service."""
    return TimeTrackingService(db)


async def get_streak_service(
    db: AsyncSession = Depends(get_db),
) -> StreakTrackingService:
    """Get streak tracking service."""
    return StreakTrackingService(db)


async def get_subject_service(db: AsyncSession = Depends(get_db)) -> SubjectService:
    """Get subject service."""
    return SubjectService(db)


# Dependency that can be used in routers
CurrentUserId = Depends(get_current_user_id)
