"""Current-user lookup: identity provider subject → Principal."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import Principal
from app.auth.errors import PrincipalResolutionError
from app.models import Role, User

logger = logging.getLogger(__name__)


async def get_current_user_info(session: AsyncSession, auth_user_id: str) -> Principal | None:
    """
    Load the active user for `auth_user_id` together with its role.

    Returns None when no active user is linked to the subject. Raises
    PrincipalResolutionError if the lookup itself fails.
    """
    try:
        result = await session.execute(
            select(User, Role)
            .outerjoin(Role, Role.id == User.role_id)
            .where(User.auth_user_id == auth_user_id, User.is_active.is_(True))
        )
        row = result.first()
    except SQLAlchemyError as exc:
        raise PrincipalResolutionError(f"User lookup failed for {auth_user_id}: {exc}") from exc

    if row is None:
        return None

    user, role = row
    return Principal.from_role(
        auth_user_id=user.auth_user_id,
        user_id=user.id,
        role_id=role.id if role else None,
        role_name=role.name if role else None,
        role_type=role.role_type if role else None,
        is_super_admin=user.is_super_admin,
    )
