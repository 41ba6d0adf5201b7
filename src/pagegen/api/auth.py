"""JWT access tokens, anti-forgery tokens, and auth dependencies."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.api.deps import get_db
from pagegen.common.config import settings
from pagegen.common.models import User

logger = structlog.get_logger()

_bearer_scheme = HTTPBearer(auto_error=False)

ROLE_HIERARCHY = {"viewer": 0, "editor": 1, "admin": 2}


def create_access_token(user_id: uuid.UUID, email: str) -> str:
    """Create a signed JWT for the given user."""
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "email": email,
        "typ": "access",
        "iat": now,
        "exp": now + timedelta(hours=settings.jwt_expiry_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT. Raises HTTPException on failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    if payload.get("typ") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return payload


async def get_current_user(
    db: AsyncSession = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> User | None:
    """FastAPI dependency: returns current authenticated user, or None if auth disabled."""
    if not settings.auth_required:
        return None

    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")

    payload = decode_access_token(credentials.credentials)
    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found or inactive")
    return user


def require_role(required_role: str):
    """Factory: returns a dependency that checks the user holds at least ``required_role``.

    Usage: Depends(require_role("editor"))
    """

    async def _check_role(
        user: Annotated[User | None, Depends(get_current_user)],
    ) -> User | None:
        if not settings.auth_required:
            return None
        if user is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
        if ROLE_HIERARCHY.get(user.role, -1) < ROLE_HIERARCHY.get(required_role, 0):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires '{required_role}' role",
            )
        return user

    return _check_role


def user_can_manage(user: User | None) -> bool:
    """Admin capability check for destructive bulk operations. Always true when auth is disabled."""
    if not settings.auth_required:
        return True
    return user is not None and user.is_active and user.role == "admin"


# ── Anti-forgery tokens ─────────────────────────────────────────────────


def create_csrf_token(action: str, user: User | None) -> str:
    """Short-lived token bound to an action name and the requesting user."""
    now = datetime.now(UTC)
    payload = {
        "sub": str(user.id) if user else "",
        "act": action,
        "typ": "csrf",
        "iat": now,
        "exp": now + timedelta(minutes=settings.csrf_token_ttl_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_csrf_token(token: str, action: str, user: User | None) -> bool:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.InvalidTokenError:
        logger.warning("csrf_token_rejected", action=action)
        return False
    expected_sub = str(user.id) if user else ""
    return payload.get("typ") == "csrf" and payload.get("act") == action and payload.get("sub") == expected_sub
