"""
Built-in role names and the shortcut rules layered above the grant table.

Shortcuts keep certain roles working even when an administrator has not
populated (or has misconfigured) the Permission rows:

    admin / super admin  → everything
    caseworker           → a fixed set of core operational elements
    citizen              → every element whose key starts with "citizen"

Shortcuts grant view and edit alike and never consult the Permission rows,
so the admin UI cannot narrow them.
"""

from dataclasses import dataclass
from enum import Enum


class RoleName(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    CASEWORKER = "caseworker"
    CASE_WORKER = "case_worker"  # older seed data spells it this way
    CITIZEN = "citizen"


CASEWORKER_ROLE_NAMES = frozenset({RoleName.CASEWORKER.value, RoleName.CASE_WORKER.value})


# ── Caseworker: core operational screens ──
_CASEWORKER_ELEMENTS: frozenset[str] = frozenset({
    "dashboard",
    "dashboards",
    "cases",
    "cases.create_case",
    "cases.edit_case",
    "cases.assign_case",
    "cases.view_details",
    "cases.case_detail",
    "notifications",
    "notifications.mark_read",
    "reports",
    "reports.create_report",
    "reports.edit_report",
    "reports.view_report",
    "reports.delete_report",
    "reports.report_builder",
    "knowledge",
    "insights",
})

CITIZEN_ELEMENT_PREFIX = "citizen"


@dataclass(frozen=True)
class ShortcutRules:
    caseworker_elements: frozenset[str] = _CASEWORKER_ELEMENTS
    citizen_prefix: str = CITIZEN_ELEMENT_PREFIX

    def caseworker_allows(self, element_key: str) -> bool:
        return element_key in self.caseworker_elements

    def citizen_allows(self, element_key: str) -> bool:
        return element_key.startswith(self.citizen_prefix)


DEFAULT_SHORTCUT_RULES = ShortcutRules()
