"""Permission check API — single and bulk element checks for the caller.

Both endpoints answer 200 for every authenticated caller; a user that
cannot be resolved simply gets `false` everywhere.
"""

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.api.deps import get_auth_user_id, get_resolver
from app.auth.permissions import PermissionType
from app.services.permission_resolver import PermissionCheck, PermissionResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/permissions", tags=["permissions"])


class CheckResponse(BaseModel):
    elementKey: str
    permissionType: PermissionType
    hasPermission: bool


class BulkCheckItem(BaseModel):
    elementKey: str = Field(min_length=1)
    permissionType: PermissionType = PermissionType.VIEW


class BulkCheckResponse(BaseModel):
    results: dict[str, bool]


@router.get("/check", response_model=CheckResponse)
async def check_permission(
    elementKey: str = Query(..., min_length=1),
    permissionType: PermissionType = Query(PermissionType.VIEW),
    auth_user_id: str = Depends(get_auth_user_id),
    resolver: PermissionResolver = Depends(get_resolver),
):
    """Check one element for the authenticated caller."""
    allowed = await resolver.check_permission(auth_user_id, elementKey, permissionType)
    return CheckResponse(elementKey=elementKey, permissionType=permissionType, hasPermission=allowed)


@router.post("/bulk-check", response_model=BulkCheckResponse)
async def bulk_check_permissions(
    body: list[BulkCheckItem],
    auth_user_id: str = Depends(get_auth_user_id),
    resolver: PermissionResolver = Depends(get_resolver),
):
    """Check many elements at once; keys are `<elementKey>.<permissionType>`."""
    results = await resolver.bulk_check_permissions(
        auth_user_id,
        [PermissionCheck(item.elementKey, item.permissionType) for item in body],
    )
    return BulkCheckResponse(results=results)
