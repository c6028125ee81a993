# thepass/models/task_transfer.py
from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from thepass.models.base import Base


class TransferStatus(str, enum.Enum):
    pending_transferee = "pending_transferee"
    pending_manager = "pending_manager"
    approved = "approved"
    rejected = "rejected"


ACTIVE_TRANSFER_STATUSES = (
    TransferStatus.pending_transferee.value,
    TransferStatus.pending_manager.value,
)

_ACTIVE_PREDICATE = text("status IN ('pending_transferee', 'pending_manager')")


class TaskTransfer(Base):
    """Request to hand an assignment over to another employee (two-stage approval)."""

    __tablename__ = "task_transfers"
    __table_args__ = (
        CheckConstraint("from_user_id <> to_user_id", name="distinct_users"),
        CheckConstraint(
            "status IN ('pending_transferee', 'pending_manager', 'approved', 'rejected')",
            name="status_domain",
        ),
        # at most one active transfer per assignment
        Index(
            "uq_task_transfers_active_assignment",
            "assignment_id",
            unique=True,
            postgresql_where=_ACTIVE_PREDICATE,
            sqlite_where=_ACTIVE_PREDICATE,
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    assignment_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("workflow_assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    from_user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False
    )
    to_user_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    requested_by: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="RESTRICT"), nullable=False
    )

    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=TransferStatus.pending_transferee.value, index=True
    )

    transfer_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    transferee_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    transferee_responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    manager_id: Mapped[UUID | None] = mapped_column(
        Uuid, ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True
    )
    manager_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    manager_responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    row_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
