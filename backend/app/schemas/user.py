"""
User management Pydantic schemas (admin only).
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List

from backend.app.models.enums import UserRole


class UserUpdate(BaseModel):
    """Fields an admin may change on a user account."""
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    mobile: Optional[str] = Field(None, max_length=20)


class UserResponse(BaseModel):
    id: int
    email: str
    username: str
    mobile: Optional[str] = None
    role: UserRole
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserListResponse(BaseModel):
    """Schema for paginated user list."""
    users: List[UserResponse]
    total: int
    page: int
    page_size: int
