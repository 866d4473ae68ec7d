"""Permission administration — per-role grant matrix, edits, registry bootstrap."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db, require_element
from app.auth.errors import (
    AccessControlError,
    BootstrapSeedError,
    SystemRoleImmutableError,
    UnknownElementError,
    UnknownRoleError,
)
from app.auth.permissions import PermissionType
from app.services.permission_editor import PermissionEditor
from app.services.permission_store import PermissionStore
from app.services.registry_bootstrap import RegistryBootstrapper

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/permissions", tags=["permissions-admin"])

can_view_admin = require_element("permissions_management", PermissionType.VIEW)
can_edit_admin = require_element("permissions_management.edit_permissions", PermissionType.EDIT)


class PermissionChange(BaseModel):
    element_key: str
    field_name: str | None = None
    type: PermissionType
    checked: bool


class SaveChangesRequest(BaseModel):
    changes: list[PermissionChange]


class SelectAllRequest(BaseModel):
    type: PermissionType
    checked: bool


def _http_error(exc: AccessControlError) -> HTTPException:
    if isinstance(exc, SystemRoleImmutableError):
        return HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, (UnknownRoleError, UnknownElementError)):
        return HTTPException(status_code=404, detail=str(exc))
    return HTTPException(status_code=400, detail=str(exc))


async def _load_editor(db: AsyncSession, role_id: str) -> PermissionEditor:
    try:
        return await PermissionEditor.load(db, role_id)
    except AccessControlError as exc:
        raise _http_error(exc)


@router.get("/registry")
async def list_registry(auth_user_id: str = Depends(can_view_admin),
                        db: AsyncSession = Depends(get_db)):
    """Registered frontend elements grouped by module."""
    grouped: dict[str, list[dict]] = {}
    for element in await PermissionStore(db).list_elements():
        grouped.setdefault(element.module, []).append({
            "id": element.id,
            "element_key": element.element_key,
            "screen": element.screen,
            "element_type": element.element_type,
            "label": element.label,
        })
    return [{"module": module, "elements": rows} for module, rows in sorted(grouped.items())]


@router.get("/roles/{role_id}/matrix")
async def get_matrix(role_id: str,
                     auth_user_id: str = Depends(can_view_admin),
                     db: AsyncSession = Depends(get_db)):
    """Effective grants for one role, grouped by module."""
    editor = await _load_editor(db, role_id)
    return editor.build_matrix()


@router.put("/roles/{role_id}")
async def save_changes(role_id: str,
                       body: SaveChangesRequest,
                       auth_user_id: str = Depends(can_edit_admin),
                       db: AsyncSession = Depends(get_db)):
    """Apply a list of checkbox toggles in order and persist the result."""
    editor = await _load_editor(db, role_id)
    try:
        for change in body.changes:
            editor.handle_permission_change(change.element_key, change.field_name, change.type, change.checked)
        written = await editor.save()
    except AccessControlError as exc:
        raise _http_error(exc)

    logger.info("Role %s permissions updated (%d rows) by %s", editor.role.name, written, auth_user_id)
    return {"saved": written, **editor.build_matrix()}


@router.post("/roles/{role_id}/modules/{module}/select-all")
async def select_all(role_id: str,
                     module: str,
                     body: SelectAllRequest,
                     auth_user_id: str = Depends(can_edit_admin),
                     db: AsyncSession = Depends(get_db)):
    """Toggle view or edit for every element of a module."""
    editor = await _load_editor(db, role_id)
    try:
        editor.select_all(module, body.type, body.checked)
        written = await editor.save()
    except AccessControlError as exc:
        raise _http_error(exc)

    logger.info("Role %s module %s set %s=%s by %s",
                editor.role.name, module, body.type.value, body.checked, auth_user_id)
    return {"saved": written, **editor.build_matrix()}


@router.post("/registry/initialize")
async def initialize_registry(auth_user_id: str = Depends(can_edit_admin),
                              db: AsyncSession = Depends(get_db)):
    """Seed the registry and default grants if the registry is empty."""
    try:
        report = await RegistryBootstrapper(db).initialize_registry()
    except BootstrapSeedError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return report.to_dict()
