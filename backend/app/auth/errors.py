"""Access-control error taxonomy.

Resolution errors never escape `PermissionResolver.check_permission`; they
are carried inside a `Decision` and collapse to a deny. Admin-side errors
are mapped to HTTP statuses by the API layer.
"""


class AccessControlError(Exception):
    pass


class PrincipalResolutionError(AccessControlError):
    """The caller's identity could not be mapped to an active user."""


class StoreLookupError(AccessControlError):
    """Reading registry, role or permission rows failed."""

    def __init__(self, message: str, element_key: str | None = None, permission_type: str | None = None):
        super().__init__(message)
        self.element_key = element_key
        self.permission_type = permission_type


class BootstrapSeedError(AccessControlError):
    """Seeding the element registry failed."""


class UnknownElementError(AccessControlError):
    def __init__(self, element_key: str):
        super().__init__(f"Unknown frontend element: {element_key}")
        self.element_key = element_key


class UnknownRoleError(AccessControlError):
    def __init__(self, role_id: str):
        super().__init__(f"Role not found: {role_id}")
        self.role_id = role_id


class SystemRoleImmutableError(AccessControlError):
    def __init__(self, role_id: str):
        super().__init__("System roles have predefined permissions that cannot be changed")
        self.role_id = role_id
