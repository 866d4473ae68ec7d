"""
Principal — the resolved "who is asking" for a permission check.

Built per check from the users/roles tables (see
`app.services.principal_service`). Nothing here is cached across requests.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.auth.roles import CASEWORKER_ROLE_NAMES, RoleName


@dataclass(frozen=True)
class Principal:
    auth_user_id: str
    user_id: str
    role_id: str | None = None
    role_name: str | None = None
    is_admin: bool = False
    is_super_admin: bool = False
    is_case_worker: bool = False
    is_citizen: bool = False

    @classmethod
    def from_role(
        cls,
        auth_user_id: str,
        user_id: str,
        role_id: str | None,
        role_name: str | None,
        role_type: str | None,
        is_super_admin: bool = False,
    ) -> Principal:
        """Derive the role flags the resolver's shortcuts look at."""
        return cls(
            auth_user_id=auth_user_id,
            user_id=user_id,
            role_id=role_id,
            role_name=role_name,
            is_admin=role_name == RoleName.ADMIN.value,
            is_super_admin=is_super_admin or role_name == RoleName.SUPER_ADMIN.value,
            is_case_worker=role_name in CASEWORKER_ROLE_NAMES or role_type == RoleName.CASE_WORKER.value,
            is_citizen=RoleName.CITIZEN.value in (role_name, role_type),
        )

    @property
    def actor(self) -> str:
        """Identity string for log lines."""
        return f"{self.role_name or 'no-role'}:{self.auth_user_id}"
