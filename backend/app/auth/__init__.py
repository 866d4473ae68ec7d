from app.auth.permissions import PermissionType, canonical_element_key, result_key
from app.auth.roles import RoleName, ShortcutRules, DEFAULT_SHORTCUT_RULES
from app.auth.context import Principal

__all__ = [
    "PermissionType", "canonical_element_key", "result_key",
    "RoleName", "ShortcutRules", "DEFAULT_SHORTCUT_RULES", "Principal",
]
