# orgauth/core/rbac.py

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from orgauth.api.deps import get_current_user, get_db_session
from orgauth.core.config import settings
from orgauth.models.user import User
from orgauth.services.directory_service import get_role_names


def AllowRoles(*allowed_roles: str):
    """
    Role-name RBAC:
    - Case-insensitive role slugs
    - Super roles (settings.SUPER_ROLE_NAMES) bypass everything
    """

    def normalize(role) -> str:
        return str(role).lower().strip()

    normalized_allowed = {normalize(r) for r in allowed_roles}
    super_roles = {normalize(r) for r in settings.SUPER_ROLE_NAMES}

    async def role_checker(
        current_user: User = Depends(get_current_user),
        session: AsyncSession = Depends(get_db_session),
    ):
        user_roles = {normalize(r) for r in await get_role_names(session, current_user.id)}

        if user_roles & super_roles:
            return current_user

        if not user_roles & normalized_allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for roles {sorted(user_roles) or ['none']}"
            )

        return current_user

    return role_checker


require_admin = AllowRoles()
