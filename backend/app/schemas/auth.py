"""
Authentication Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from backend.app.models.enums import UserRole


class UserRegister(BaseModel):
    """
    POST /auth/register body.

    Staff register themselves as USER; ADMIN accounts are rejected here
    and come from `seed_users.py` or an admin role change instead.
    """
    email: EmailStr
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=6)
    mobile: Optional[str] = Field(default=None, max_length=20, pattern=r"^\+?[0-9]{6,19}$")
    role: UserRole = UserRole.USER


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Bearer token plus the identity it was issued to."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user_id: int
    username: str
    email: str
    role: UserRole


class RefreshRequest(BaseModel):
    refresh_token: str


class LogoutRequest(BaseModel):
    """Optional logout body; a refresh token sent here is revoked too."""
    refresh_token: Optional[str] = None
