"""
Role guards for admin-only routes.
"""

from typing import Iterable
from fastapi import Depends
from backend.app.core.dependencies import get_current_user
from backend.app.core.exceptions import InsufficientPermissionsError
from backend.app.models.enums import UserRole


def require_role(allowed_roles: Iterable[UserRole]):
    """
    Dependency factory restricting a route to the given roles.

    The role is read from the authenticated user resolved by
    `get_current_user`, which reflects the stored role rather than the
    one baked into the token.

    Raises:
        InsufficientPermissionsError: role missing or not allowed
    """
    allowed = {UserRole(role) for role in allowed_roles}

    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        role = current_user.get("role")
        if role is None or UserRole(role) not in allowed:
            raise InsufficientPermissionsError(
                "Access denied",
                details={"required_roles": sorted(r.value for r in allowed)}
            )
        return current_user

    return role_checker
