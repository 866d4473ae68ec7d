"""
API Dependencies — DB session, caller identity, element-permission guards.

Access tokens are issued by the external identity provider. The
`get_auth_user_id` dependency:
  1. Extracts the Bearer token from the Authorization header
  2. Decodes and validates the JWT
  3. Returns its `sub` claim (the identity provider's user id)

Mapping that id to a user and role happens inside the resolver, so a
valid token for an unknown user still reaches the check endpoints and is
simply denied there.
"""

import logging
from typing import AsyncGenerator

from fastapi import Depends, Request, HTTPException
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import async_session
from app.auth.jwt import decode_access_token
from app.auth.permissions import PermissionType
from app.services.permission_resolver import PermissionResolver

logger = logging.getLogger(__name__)


# ── Database session ─────────────────────────────────────────────────────────

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session per request, commit on success, rollback on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


# ── Caller identity (JWT authentication) ─────────────────────────────────────

def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=401,
            detail="Missing or invalid Authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_header[7:]  # strip "Bearer "


async def get_auth_user_id(request: Request) -> str:
    token = _bearer_token(request)
    try:
        claims = decode_access_token(token)
    except JWTError as e:
        logger.debug("JWT decode failed: %s", e)
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims["sub"]


async def get_resolver(db: AsyncSession = Depends(get_db)) -> PermissionResolver:
    return PermissionResolver(db)


# ── Element guards ───────────────────────────────────────────────────────────

def require_element(element_key: str, permission_type: PermissionType = PermissionType.VIEW):
    """
    FastAPI dependency that runs the permission resolver for the caller and
    rejects with 403 when it denies.

    Usage:
        @router.put("/roles/{role_id}")
        async def save(auth_user_id: str = Depends(
            require_element("permissions_management.edit_permissions", PermissionType.EDIT))):
            ...
    """
    async def _check(
        auth_user_id: str = Depends(get_auth_user_id),
        resolver: PermissionResolver = Depends(get_resolver),
    ) -> str:
        if not await resolver.check_permission(auth_user_id, element_key, permission_type):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: requires {permission_type.value} on {element_key}",
            )
        return auth_user_id
    return _check
