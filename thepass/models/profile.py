# thepass/models/profile.py
from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from thepass.models.base import Base


class ProfileRole(str, enum.Enum):
    employee = "employee"
    lead = "lead"
    manager = "manager"
    admin = "admin"
    kitchen_manager = "kitchen_manager"
    ordering_manager = "ordering_manager"


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)

    # Stored as text; permissions are derived in core.rbac
    role: Mapped[str] = mapped_column(String(50), nullable=False, default=ProfileRole.employee.value)

    # Profiles are never deleted, only archived
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
