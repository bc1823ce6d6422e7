"""
User management API Endpoints (admin only).

Deactivating a user revokes every token they hold.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.models.enums import UserRole
from backend.app.schemas.user import UserUpdate, UserResponse, UserListResponse
from backend.app.core.guards import require_role
from backend.app.core.exceptions import (
    ResourceNotFoundError, NoFieldsToUpdateError, DuplicateResourceError, BadRequestError
)
from backend.app.core.token_revocation import revoke_all_user_tokens, clear_user_token_revocation
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/users", tags=["Users"])

require_admin = require_role([UserRole.ADMIN])


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise ResourceNotFoundError("User", user_id)
    return user


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    List all users (admin-only).

    Returns paginated user list with role and status information.
    """
    total = (await db.execute(select(func.count(User.id)))).scalar()

    offset = (page - 1) * page_size
    query = select(User).order_by(User.created_at.desc(), User.id.desc()).offset(offset).limit(page_size)
    result = await db.execute(query)

    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int = Path(..., description="User ID"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    user = await _get_user_or_404(db, user_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_data: UserUpdate,
    user_id: int = Path(..., description="User ID"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a user's role, active flag or mobile.

    Deactivation revokes all of the user's tokens; reactivation clears that.
    """
    update_data = user_data.model_dump(exclude_unset=True)
    if not update_data:
        raise NoFieldsToUpdateError("user")

    user = await _get_user_or_404(db, user_id)

    if update_data.get("mobile"):
        existing = await db.execute(
            select(User.id).where(User.mobile == update_data["mobile"], User.id != user_id)
        )
        if existing.first():
            raise DuplicateResourceError("User", "mobile", update_data["mobile"])

    for field, value in update_data.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)

    if "is_active" in update_data:
        if update_data["is_active"]:
            await clear_user_token_revocation(user_id)
        else:
            await revoke_all_user_tokens(user_id)

    await log_event(
        db=db,
        action=AuditAction.USER_UPDATED,
        actor_id=admin["user_id"],
        actor_username=admin["sub"],
        entity="user",
        entity_id=user_id,
        metadata={"updated_fields": sorted(update_data)}
    )

    return UserResponse.model_validate(user)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int = Path(..., description="User ID"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    if user_id == admin["user_id"]:
        raise BadRequestError("Admins cannot delete their own account")

    user = await _get_user_or_404(db, user_id)
    username = user.username
    await db.delete(user)
    await db.commit()
    await revoke_all_user_tokens(user_id)

    await log_event(
        db=db,
        action=AuditAction.USER_DELETED,
        actor_id=admin["user_id"],
        actor_username=admin["sub"],
        entity="user",
        entity_id=user_id,
        metadata={"username": username}
    )

    return {"message": "User deleted successfully", "id": user_id}
