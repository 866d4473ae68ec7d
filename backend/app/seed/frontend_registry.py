"""Fixed catalog of frontend elements and the default grants per built-in role."""

# ──────────────────────────────────────────────
# Registry elements
# ──────────────────────────────────────────────
REGISTRY_ELEMENTS = [
    # Main navigation pages
    {"element_key": "dashboard", "module": "dashboard", "screen": "main_dashboard", "element_type": "page", "label": "Dashboard"},
    {"element_key": "cases", "module": "cases", "screen": "cases_list", "element_type": "page", "label": "Cases"},
    {"element_key": "notifications", "module": "notifications", "screen": "notifications_list", "element_type": "page", "label": "Notifications"},
    {"element_key": "reports", "module": "reports", "screen": "reports_list", "element_type": "page", "label": "Reports"},
    {"element_key": "knowledge", "module": "knowledge", "screen": "knowledge_list", "element_type": "page", "label": "Knowledge Base"},
    {"element_key": "insights", "module": "insights", "screen": "insights_list", "element_type": "page", "label": "Insights"},
    # Admin pages
    {"element_key": "users_management", "module": "users_management", "screen": "users_list", "element_type": "page", "label": "Users Management"},
    {"element_key": "permissions_management", "module": "permissions_management", "screen": "permissions_list", "element_type": "page", "label": "Permissions Management"},
    {"element_key": "roles_management", "module": "roles_management", "screen": "roles_list", "element_type": "page", "label": "Roles Management"},
    # Cases
    {"element_key": "cases.create_case", "module": "cases", "screen": "cases_list", "element_type": "button", "label": "Create Case Button"},
    {"element_key": "cases.export_cases", "module": "cases", "screen": "cases_list", "element_type": "button", "label": "Export Cases Button"},
    {"element_key": "cases.view_all_cases", "module": "cases", "screen": "cases_list", "element_type": "feature", "label": "View All Cases"},
    {"element_key": "cases.assign_cases", "module": "cases", "screen": "case_detail", "element_type": "feature", "label": "Assign Cases"},
    # Case detail
    {"element_key": "case_detail", "module": "cases", "screen": "case_detail", "element_type": "page", "label": "Case Detail"},
    {"element_key": "case_detail.edit_case", "module": "cases", "screen": "case_detail", "element_type": "button", "label": "Edit Case Button"},
    {"element_key": "case_detail.close_case", "module": "cases", "screen": "case_detail", "element_type": "button", "label": "Close Case Button"},
    {"element_key": "case_detail.add_notes", "module": "cases", "screen": "case_detail", "element_type": "feature", "label": "Add Case Notes"},
    {"element_key": "case_detail.view_internal_notes", "module": "cases", "screen": "case_detail", "element_type": "feature", "label": "View Internal Notes"},
    {"element_key": "case_detail.manage_tasks", "module": "cases", "screen": "case_detail", "element_type": "feature", "label": "Manage Case Tasks"},
    # Users management
    {"element_key": "users_management.create_user", "module": "users_management", "screen": "users_list", "element_type": "button", "label": "Create User Button"},
    {"element_key": "users_management.edit_user", "module": "users_management", "screen": "users_list", "element_type": "button", "label": "Edit User Button"},
    {"element_key": "users_management.delete_user", "module": "users_management", "screen": "users_list", "element_type": "button", "label": "Delete User Button"},
    # Roles management
    {"element_key": "roles_management.create_role", "module": "roles_management", "screen": "roles_list", "element_type": "button", "label": "Create Role Button"},
    {"element_key": "roles_management.edit_role", "module": "roles_management", "screen": "roles_list", "element_type": "button", "label": "Edit Role Button"},
    {"element_key": "roles_management.delete_role", "module": "roles_management", "screen": "roles_list", "element_type": "button", "label": "Delete Role Button"},
    # Permissions management
    {"element_key": "permissions_management.edit_permissions", "module": "permissions_management", "screen": "permissions_list", "element_type": "feature", "label": "Edit Permissions"},
    {"element_key": "permissions_management.save_permissions", "module": "permissions_management", "screen": "permissions_list", "element_type": "button", "label": "Save Permissions Button"},
    # Reports
    {"element_key": "reports.create_report", "module": "reports", "screen": "reports_list", "element_type": "button", "label": "Create Report Button"},
    {"element_key": "reports.export_report", "module": "reports", "screen": "reports_list", "element_type": "button", "label": "Export Report Button"},
    # Citizen portal
    {"element_key": "citizen_dashboard", "module": "citizen", "screen": "citizen_dashboard", "element_type": "page", "label": "Citizen Dashboard"},
    {"element_key": "citizen_cases", "module": "citizen", "screen": "citizen_cases", "element_type": "page", "label": "Citizen Cases"},
    {"element_key": "citizen_notifications", "module": "citizen", "screen": "citizen_notifications", "element_type": "page", "label": "Citizen Notifications"},
    {"element_key": "citizen_knowledge", "module": "citizen", "screen": "citizen_knowledge", "element_type": "page", "label": "Citizen Knowledge Base"},
]


# ──────────────────────────────────────────────
# Default grants: role name → element keys
# ──────────────────────────────────────────────
_CASEWORKER_DEFAULTS = {
    "view": ["dashboard", "cases", "case_detail", "notifications"],
    "edit": ["case_detail.add_notes", "case_detail.manage_tasks"],
}

DEFAULT_ROLE_PERMISSIONS: dict[str, dict[str, list[str]]] = {
    "caseworker": _CASEWORKER_DEFAULTS,
    "case_worker": _CASEWORKER_DEFAULTS,
    "admin": {
        "view": [
            "dashboard", "cases", "case_detail", "notifications", "reports",
            "users_management", "permissions_management", "roles_management",
        ],
        "edit": [
            "cases.create_case", "cases.export_cases",
            "case_detail.edit_case", "case_detail.close_case",
            "case_detail.add_notes", "case_detail.manage_tasks",
            "users_management.create_user", "users_management.edit_user",
            "roles_management.create_role", "roles_management.edit_role",
            "permissions_management.edit_permissions",
        ],
    },
    "citizen": {
        "view": ["citizen_dashboard", "citizen_cases", "citizen_notifications", "citizen_knowledge"],
        "edit": [],
    },
}
