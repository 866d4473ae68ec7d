"""
Permission vocabulary for frontend elements.

Every gated UI element is addressed by a stable dotted `element_key`
(e.g. `cases.create_case`). A check asks for one of two permission types
on that key: `view` or `edit`.

Older callers address grants as `(module_name, field_name)`; they are
translated to the canonical element key at the boundary, so the resolver
only ever sees element keys.
"""

from enum import Enum


class PermissionType(str, Enum):
    VIEW = "view"
    EDIT = "edit"


def canonical_element_key(module_name: str, field_name: str | None = None) -> str:
    """Translate the legacy `(module_name, field_name)` shape to an element key."""
    if not field_name:
        return module_name
    return f"{module_name}.{field_name}"


def result_key(element_key: str, permission_type: PermissionType | str) -> str:
    """Key used in bulk-check responses: `<elementKey>.<permissionType>`."""
    return f"{element_key}.{PermissionType(permission_type).value}"
