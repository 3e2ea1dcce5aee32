"""
Authentication Service

Account creation, password verification and JWT issuing/decoding.

Tokens are HS256 JWTs whose ``sub`` claim is the user id. The signing key
and lifetime come from settings (JWT_SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES).

Usage:
    from study_tracker.services.auth_service import AuthService

    service = AuthService(db)
    await service.create_user(request)
    token = await service.login(request)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from study_tracker.config import Settings, settings as default_settings
from study_tracker.db.models import User
from study_tracker.middleware.error_handling import AuthenticationError, ConflictError
from study_tracker.models.auth import CreateUserRequest, LoginRequest, TokenResponse
from study_tracker.models.base import StatusResponse

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored hash."""
    return pwd_context.verify(password, password_hash)


def create_access_token(
    user_id: UUID,
    config: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Issue a signed bearer token for a user.

    Args:
        user_id: Subject of the token.
        config: Settings providing key, algorithm and lifetime.
        now: Issue time (defaults to the current UTC time).

    Returns:
        str: Encoded JWT.
    """
    config = config or default_settings
    now = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str, config: Optional[Settings] = None) -> UUID:
    """
    Validate a bearer token and return the user id it was issued for.

    Raises:
        AuthenticationError: If the token is malformed, expired or forged.
    """
    config = config or default_settings
    try:
        payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
        return UUID(payload["sub"])
    except (JWTError, KeyError, ValueError) as e:
        raise AuthenticationError("Invalid or expired token") from e


class AuthService:
    """Service for sign-up and login."""

    def __init__(self, db: AsyncSession):
        """
        Initialize the auth service.

        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    async def create_user(self, request: CreateUserRequest) -> StatusResponse:
        """
        Create an account with a zero streak and no daily goal.

        Raises:
            ConflictError: If the email is already registered.
        """
        email = request.email.lower()
        existing = await self.db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("Email already registered")

        user = User(
            name=request.name,
            email=email,
            password_hash=hash_password(request.password),
            streak=0,
            study_minutes=0,
            studied_minutes=0,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent sign-up for the same email
            await self.db.rollback()
            raise ConflictError("Email already registered") from e

        logger.info(f"Created user {user.id}")
        return StatusResponse(status=202, message="User created successfully")

    async def login(self, request: LoginRequest) -> TokenResponse:
        """
        Verify credentials and issue a token.

        Raises:
            AuthenticationError: If the email is unknown or the password wrong.
        """
        result = await self.db.execute(
            select(User).where(User.email == request.email.lower())
        )
        user = result.scalar_one_or_none()
        if user is None or not verify_password(request.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        return TokenResponse(token=create_access_token(user.id))
