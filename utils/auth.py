"""
JWT Authentication utilities for Django Ninja and the comment socket.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from django.conf import settings
from django.http import HttpRequest
from ninja.errors import HttpError
from ninja.security import HttpBearer

from apps.users.models import User, UserRole


class SocketAuthRejected(Exception):
    """A well-formed token pointed at an account that does not exist."""


class AuthBearer(HttpBearer):
    """JWT Bearer token authentication."""

    def authenticate(self, request: HttpRequest, token: str) -> User | None:
        payload = verify_token(token)
        if not payload:
            return None

        user = _active_user(payload.get("userId"))
        if user:
            request.auth_user = user
        return user


class OptionalAuthBearer(HttpBearer):
    """Optional JWT authentication - doesn't fail if no token."""

    def authenticate(self, request: HttpRequest, token: str) -> User | None:
        if not token:
            return None
        return AuthBearer().authenticate(request, token)


def _active_user(user_id: Any) -> User | None:
    try:
        user_id = uuid.UUID(str(user_id))
    except ValueError:
        return None
    return User.objects.filter(id=user_id, is_active=True).first()


def get_current_user(request: HttpRequest) -> User:
    """Get authenticated user from request."""
    return getattr(request, "auth_user", request.auth)


def get_optional_user(request: HttpRequest) -> User | None:
    """Resolve the caller on public routes; anonymous callers get None."""
    return OptionalAuthBearer()(request)


def is_admin(user: User | None) -> bool:
    return user is not None and user.role == UserRole.ADMIN


def require_admin(request: HttpRequest) -> User:
    """Require admin role."""
    user = get_current_user(request)
    if user.role != UserRole.ADMIN:
        raise HttpError(403, "Admin access required")
    return user


def create_token(user: User) -> str:
    """Create JWT token for user."""
    payload = {
        "userId": str(user.id),
        "email": user.email,
        "role": user.role,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRE_HOURS),
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict[str, Any] | None:
    """Verify JWT token and return payload."""
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except jwt.InvalidTokenError:
        return None


def authenticate_socket(token: str | None) -> User | None:
    """
    Resolve the user behind a socket handshake token.

    Missing, malformed or expired tokens downgrade the connection to an
    anonymous reader (None). A token that verifies but names no active
    account raises SocketAuthRejected so the handshake can be refused.
    """
    if not token:
        return None

    payload = verify_token(token)
    if payload is None:
        return None

    user = _active_user(payload.get("userId"))
    if user is None:
        raise SocketAuthRejected("User not found")
    return user
