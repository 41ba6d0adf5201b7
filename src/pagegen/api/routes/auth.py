"""Auth routes: development login and current-user lookup."""

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pagegen.api.auth import create_access_token, get_current_user
from pagegen.api.deps import get_db
from pagegen.common.config import settings
from pagegen.common.models import DevLoginRequest, TokenResponse, User, UserResponse

logger = structlog.get_logger()

router = APIRouter()


@router.post("/auth/dev-login", response_model=TokenResponse)
async def dev_login(
    request: DevLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Dev-only login endpoint. Only available when AUTH_REQUIRED=false."""
    if settings.auth_required:
        raise HTTPException(status_code=403, detail="Dev login disabled in production")

    result = await db.execute(select(User).where(User.email == request.email))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(email=request.email, name=request.name, role=request.role)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info("user_created", email=request.email, role=request.role)

    token = create_access_token(user.id, user.email)
    return TokenResponse(access_token=token, user=UserResponse.model_validate(user))


@router.get("/auth/me", response_model=UserResponse)
async def get_me(
    user: User | None = Depends(get_current_user),
):
    """Get current user profile. Returns 401 if auth enabled and no valid token."""
    if not settings.auth_required:
        raise HTTPException(status_code=501, detail="Auth not enabled")
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return UserResponse.model_validate(user)
