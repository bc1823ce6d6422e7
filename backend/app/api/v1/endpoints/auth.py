"""
Authentication API endpoints.

Provides register, login, refresh, logout and current-user endpoints.
Register and login are rate limited per client address.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.models.enums import UserRole
from backend.app.schemas.auth import (
    UserRegister, UserLogin, TokenResponse, RefreshRequest, LogoutRequest
)
from backend.app.schemas.user import UserResponse
from backend.app.core.security import hash_password, verify_password
from backend.app.core.config import settings
from backend.app.core.jwt import REFRESH_TOKEN, create_access_token, create_refresh_token, decode_token
from backend.app.core.rate_limit import limiter
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import (
    AuthenticationError, DuplicateResourceError, InsufficientPermissionsError
)
from backend.app.core.token_revocation import are_user_tokens_revoked, is_token_revoked, revoke_token
from backend.app.services.audit import log_event, AuditAction

logger = logging.getLogger("tours_booking.auth")

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_for(user: User, refresh_token: Optional[str] = None) -> TokenResponse:
    """Fresh access token; a new refresh token unless one is passed in."""
    jwt_payload = {
        "sub": user.username,
        "user_id": user.id,
        "email": user.email,
        "role": user.role.value,
    }
    return TokenResponse(
        access_token=create_access_token(data=jwt_payload),
        refresh_token=refresh_token or create_refresh_token(user.id),
        token_type="bearer",
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.auth_rate_limit)
async def register(
    user_data: UserRegister,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user.

    - ADMIN role cannot be created via API.
    - Email and mobile must be unique.
    """
    if user_data.role == UserRole.ADMIN:
        raise InsufficientPermissionsError("Admin users cannot be registered via API")

    result = await db.execute(select(User.id).where(User.email == user_data.email))
    if result.first():
        raise DuplicateResourceError("User", "email", user_data.email)

    if user_data.mobile:
        result = await db.execute(select(User.id).where(User.mobile == user_data.mobile))
        if result.first():
            raise DuplicateResourceError("User", "mobile", user_data.mobile)

    new_user = User(
        email=user_data.email,
        username=user_data.username,
        mobile=user_data.mobile,
        hashed_password=hash_password(user_data.password),
        role=user_data.role or UserRole.USER,
        is_active=True,
    )

    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    await log_event(
        db=db,
        action=AuditAction.USER_REGISTERED,
        actor_id=new_user.id,
        actor_username=new_user.username,
        entity="user",
        entity_id=new_user.id,
    )
    logger.info("User registered", extra={"user_id": new_user.id})

    return _token_for(new_user)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    credentials: UserLogin,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Login with email and password and return a JWT token.

    Successful and failed attempts are written to the audit log.
    """
    ip_address = request.client.host if request.client else None

    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user:
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_username=credentials.email,
            metadata={"reason": "User not found"},
            ip_address=ip_address,
        )
        raise AuthenticationError("Invalid credentials")

    if not verify_password(credentials.password, user.hashed_password):
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_id=user.id,
            actor_username=user.username,
            metadata={"reason": "Invalid password"},
            ip_address=ip_address,
        )
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_id=user.id,
            actor_username=user.username,
            metadata={"reason": "Account is inactive"},
            ip_address=ip_address,
        )
        raise AuthenticationError("Invalid credentials")

    user.last_login = datetime.now(timezone.utc)
    await db.commit()
    await db.refresh(user)

    await log_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        actor_id=user.id,
        actor_username=user.username,
        ip_address=ip_address,
    )

    return _token_for(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    body: RefreshRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Exchange a refresh token for a new access token.

    The refresh token must be unexpired, not revoked, and belong to a user
    that still exists and is active. It is returned unchanged.
    """
    payload = decode_token(body.refresh_token, REFRESH_TOKEN)
    if payload is None or not payload.get("user_id"):
        logger.warning("Refresh with invalid token")
        raise AuthenticationError("Invalid refresh token")

    user_id = payload["user_id"]
    if await is_token_revoked(body.refresh_token) or await are_user_tokens_revoked(user_id):
        logger.warning("Refresh with revoked token", extra={"user_id": user_id})
        raise AuthenticationError("Refresh token has been revoked")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise AuthenticationError("Invalid refresh token")

    logger.info("Token refreshed", extra={"user_id": user_id})
    return _token_for(user, refresh_token=body.refresh_token)


@router.post("/logout")
async def logout(
    body: Optional[LogoutRequest] = None,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Revoke the presented access token and, if sent, the refresh token."""
    revoked = await revoke_token(current_user["token"], current_user["user_id"])

    if body and body.refresh_token:
        payload = decode_token(body.refresh_token, REFRESH_TOKEN)
        if payload and payload.get("user_id") == current_user["user_id"]:
            await revoke_token(
                body.refresh_token,
                current_user["user_id"],
                ttl_seconds=settings.refresh_token_expire_minutes * 60,
            )

    await log_event(
        db=db,
        action=AuditAction.LOGOUT,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        metadata={"revoked": revoked},
    )

    return {"message": "Logged out", "revoked": revoked}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get current authenticated user information.

    Raises:
        404: If user not found in database
    """
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return UserResponse.model_validate(user)
