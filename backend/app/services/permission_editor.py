"""
Permission Editor — staged grant edits for one role.

Backs the permission administration screen: the grid of modules →
elements with a view and an edit checkbox each. Changes are staged and
written in one `save()`.

Toggle rules:
  - unchecking view also clears edit
  - checking edit also sets view
  - a later change to the same element replaces the earlier one

System roles are read-only: every checkbox is disabled, reads report
True, and writes raise SystemRoleImmutableError.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.errors import SystemRoleImmutableError, UnknownElementError, UnknownRoleError
from app.auth.permissions import PermissionType, canonical_element_key
from app.models import Permission, RegistryElement, Role
from app.services.permission_store import PermissionStore

logger = logging.getLogger(__name__)


@dataclass
class StagedChange:
    element_key: str
    can_view: bool
    can_edit: bool


class PermissionEditor:
    def __init__(
        self,
        store: PermissionStore,
        role: Role,
        elements: list[RegistryElement],
        stored: dict[str, Permission],
    ):
        self.store = store
        self.role = role
        self.elements = {e.element_key: e for e in elements}
        self.stored = stored
        self.staged: OrderedDict[str, StagedChange] = OrderedDict()

    @classmethod
    async def load(cls, session: AsyncSession, role_id: str) -> "PermissionEditor":
        store = PermissionStore(session)
        role = await store.get_role(role_id)
        if role is None:
            raise UnknownRoleError(role_id)
        elements = await store.list_elements()
        stored = await store.permissions_for_role(role_id)
        return cls(store, role, elements, stored)

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self.staged)

    def get_effective_permission(
        self,
        element_key: str,
        field_name: str | None,
        permission_type: PermissionType | str,
    ) -> bool:
        key = canonical_element_key(element_key, field_name)
        permission_type = PermissionType(permission_type)

        change = self.staged.get(key)
        if change is not None:
            return change.can_edit if permission_type == PermissionType.EDIT else change.can_view

        if self.role.is_system:
            return True

        perm = self.stored.get(key)
        if perm is None:
            return False
        return bool(perm.can_edit if permission_type == PermissionType.EDIT else perm.can_view)

    def handle_permission_change(
        self,
        element_key: str,
        field_name: str | None,
        permission_type: PermissionType | str,
        checked: bool,
    ) -> StagedChange:
        if self.role.is_system:
            raise SystemRoleImmutableError(self.role.id)

        key = canonical_element_key(element_key, field_name)
        if key not in self.elements:
            raise UnknownElementError(key)
        permission_type = PermissionType(permission_type)

        can_view = self.get_effective_permission(key, None, PermissionType.VIEW)
        can_edit = self.get_effective_permission(key, None, PermissionType.EDIT)

        if permission_type == PermissionType.VIEW:
            can_view = checked
            if not checked:
                can_edit = False
        else:
            can_edit = checked
            if checked:
                can_view = True

        self.staged.pop(key, None)
        change = StagedChange(element_key=key, can_view=can_view, can_edit=can_edit)
        self.staged[key] = change
        return change

    def select_all(self, module: str, permission_type: PermissionType | str, checked: bool) -> int:
        """Apply one toggle to every element of `module`; returns how many were touched."""
        keys = [key for key, element in self.elements.items() if element.module == module]
        if not keys:
            raise UnknownElementError(module)
        for key in keys:
            self.handle_permission_change(key, None, permission_type, checked)
        return len(keys)

    def build_matrix(self) -> dict:
        modules: dict[str, list[dict]] = {}
        for key in sorted(self.elements):
            element = self.elements[key]
            modules.setdefault(element.module, []).append({
                "element_key": key,
                "label": element.label,
                "screen": element.screen,
                "element_type": element.element_type,
                "can_view": self.get_effective_permission(key, None, PermissionType.VIEW),
                "can_edit": self.get_effective_permission(key, None, PermissionType.EDIT),
                "disabled": self.role.is_system,
            })

        return {
            "role": {
                "id": self.role.id,
                "name": self.role.name,
                "role_type": self.role.role_type,
                "is_system": self.role.is_system,
            },
            "has_unsaved_changes": self.has_unsaved_changes,
            "modules": [
                {
                    "module": module,
                    "all_view": all(row["can_view"] for row in rows),
                    "all_edit": all(row["can_edit"] for row in rows),
                    "disabled": self.role.is_system,
                    "elements": rows,
                }
                for module, rows in sorted(modules.items())
            ],
        }

    async def save(self) -> int:
        """Upsert every staged change; returns the number of rows written."""
        if self.role.is_system:
            raise SystemRoleImmutableError(self.role.id)

        written = 0
        for key, change in self.staged.items():
            perm = await self.store.upsert_permission(
                self.role.id, self.elements[key], change.can_view, change.can_edit,
            )
            self.stored[key] = perm
            written += 1

        if written:
            logger.info("Saved %d permission changes for role %s", written, self.role.name)
        self.staged.clear()
        return written
