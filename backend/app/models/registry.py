from datetime import datetime
from uuid import uuid4

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class RegistryElement(Base):
    """One addressable UI page, button or feature.

    `element_key` is a stable identifier: permission rows and the hard-coded
    shortcut lists reference it by string, so renaming one needs a migration.
    """

    __tablename__ = "frontend_registry"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    element_key: Mapped[str] = mapped_column(String(150), unique=True, index=True)
    module: Mapped[str] = mapped_column(String(50), index=True)
    screen: Mapped[str] = mapped_column(String(80))
    element_type: Mapped[str] = mapped_column(String(20))  # "page" | "button" | "feature"
    label: Mapped[str] = mapped_column(String(200))
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    permissions: Mapped[list["Permission"]] = relationship(back_populates="element")
