from datetime import datetime
from uuid import uuid4

from sqlalchemy import String, Boolean, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Permission(Base):
    """Per-(role, element) grant. A missing row means no view and no edit."""

    __tablename__ = "permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "frontend_registry_id", name="uq_permissions_role_element"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    role_id: Mapped[str] = mapped_column(ForeignKey("roles.id"), index=True)
    frontend_registry_id: Mapped[str] = mapped_column(ForeignKey("frontend_registry.id"), index=True)
    can_view: Mapped[bool] = mapped_column(Boolean, default=False)
    can_edit: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    role: Mapped["Role"] = relationship(back_populates="permissions")
    element: Mapped["RegistryElement"] = relationship(back_populates="permissions")
