from datetime import datetime
from uuid import uuid4

from sqlalchemy import String, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    role_type: Mapped[str] = mapped_column(String(30), default="custom")
    is_system: Mapped[bool] = mapped_column(Boolean, default=False)  # grants are read-only in the admin UI
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    permissions: Mapped[list["Permission"]] = relationship(back_populates="role")
