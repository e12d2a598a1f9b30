"""JWT authentication dependency for FastAPI.

Validates Bearer tokens from the Authorization header and extracts the
caller's identity and marketplace role.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from src.config import settings
from src.exceptions import ForbiddenException, UnauthorizedException
from src.models.enums import UserRole

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """Represents the authenticated user extracted from a JWT token."""

    id: uuid.UUID
    email: str
    role: UserRole
    is_platform_admin: bool = False


def _decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises UnauthorizedException on failure."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        logger.warning("JWT validation failed: %s", exc)
        raise UnauthorizedException("Invalid or expired token") from exc


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> AuthenticatedUser:
    """FastAPI dependency that extracts and validates the current user from JWT."""
    if credentials is None:
        raise UnauthorizedException("Authentication required")

    payload = _decode_token(credentials.credentials)

    try:
        role = UserRole(payload.get("role", UserRole.CUSTOMER.value))
        user = AuthenticatedUser(
            id=uuid.UUID(payload["sub"]),
            email=payload["email"],
            role=role,
            is_platform_admin=bool(payload.get("is_platform_admin", role is UserRole.ADMIN)),
        )
    except (KeyError, ValueError) as exc:
        raise UnauthorizedException("Token is missing required claims") from exc

    request.state.user = user
    return user


async def require_platform_admin(
    user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Dependency that only lets platform staff through."""
    if not user.is_platform_admin:
        raise ForbiddenException("This action requires platform admin privileges")
    return user


def create_access_token(user: AuthenticatedUser, expires_minutes: int | None = None) -> str:
    """Issue a signed token for ``user``. Used by seed scripts and tests."""
    expires = datetime.now(UTC) + timedelta(
        minutes=expires_minutes if expires_minutes is not None else settings.jwt_expiry_minutes
    )
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "is_platform_admin": user.is_platform_admin,
        "exp": expires,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
