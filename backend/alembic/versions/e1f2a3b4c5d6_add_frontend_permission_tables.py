"""Add roles, frontend registry, permissions and users tables

Revision ID: e1f2a3b4c5d6
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates the access-control tables and seeds the three built-in roles.
The registry itself is filled by the registry bootstrapper
(`python -m app.seed.registry`), not here.
"""
from typing import Sequence, Union
from uuid import uuid4

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "e1f2a3b4c5d6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "roles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("role_type", sa.String(30), nullable=False, server_default="custom"),
        sa.Column("is_system", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_roles_name", "roles", ["name"], unique=True)

    op.create_table(
        "frontend_registry",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("element_key", sa.String(150), nullable=False),
        sa.Column("module", sa.String(50), nullable=False),
        sa.Column("screen", sa.String(80), nullable=False),
        sa.Column("element_type", sa.String(20), nullable=False),
        sa.Column("label", sa.String(200), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_frontend_registry_element_key", "frontend_registry", ["element_key"], unique=True)
    op.create_index("ix_frontend_registry_module", "frontend_registry", ["module"])

    op.create_table(
        "permissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("role_id", sa.String(36), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("frontend_registry_id", sa.String(36), sa.ForeignKey("frontend_registry.id"), nullable=False),
        sa.Column("can_view", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("can_edit", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("role_id", "frontend_registry_id", name="uq_permissions_role_element"),
    )
    op.create_index("ix_permissions_role_id", "permissions", ["role_id"])
    op.create_index("ix_permissions_frontend_registry_id", "permissions", ["frontend_registry_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("auth_user_id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False, server_default=""),
        sa.Column("role_id", sa.String(36), sa.ForeignKey("roles.id"), nullable=True),
        sa.Column("is_super_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_auth_user_id", "users", ["auth_user_id"], unique=True)
    op.create_index("ix_users_email", "users", ["email"])

    roles_table = sa.table(
        "roles",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("role_type", sa.String),
        sa.column("is_system", sa.Boolean),
        sa.column("description", sa.String),
    )
    op.bulk_insert(roles_table, [
        {"id": str(uuid4()), "name": "admin", "role_type": "admin", "is_system": True,
         "description": "Full access to the staff console"},
        {"id": str(uuid4()), "name": "caseworker", "role_type": "case_worker", "is_system": False,
         "description": "Handles citizen cases"},
        {"id": str(uuid4()), "name": "citizen", "role_type": "citizen", "is_system": False,
         "description": "Citizen portal user"},
    ])


def downgrade() -> None:
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_auth_user_id", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_permissions_frontend_registry_id", table_name="permissions")
    op.drop_index("ix_permissions_role_id", table_name="permissions")
    op.drop_table("permissions")
    op.drop_index("ix_frontend_registry_module", table_name="frontend_registry")
    op.drop_index("ix_frontend_registry_element_key", table_name="frontend_registry")
    op.drop_table("frontend_registry")
    op.drop_index("ix_roles_name", table_name="roles")
    op.drop_table("roles")
