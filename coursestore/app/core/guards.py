"""
Security guards for role-based access control.
"""

from typing import List
from fastapi import Depends
from coursestore.app.models.user import UserRole
from coursestore.app.core.dependencies import get_current_user
from coursestore.app.core.exceptions import PermissionDeniedError


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/admin/invoices")
        async def create(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...

    Raises:
        PermissionDeniedError (403) if the token role is missing, unknown or not allowed
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        user_role_str = current_user.get("role")
        if not user_role_str:
            raise PermissionDeniedError("Role information missing from token")

        try:
            user_role = UserRole(user_role_str)
        except ValueError:
            raise PermissionDeniedError("Invalid role in token")

        if user_role not in allowed_roles:
            raise PermissionDeniedError(
                f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


def is_admin(current_user: dict) -> bool:
    return current_user.get("role") == UserRole.ADMIN.value
