# thepass/models/workflow_assignment.py
from __future__ import annotations

import enum
from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from thepass.models.base import Base


class AssignmentStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"


class WorkflowAssignment(Base):
    """One employee's occurrence of a workflow."""

    __tablename__ = "workflow_assignments"
    __table_args__ = (
        # one row per (employee, workflow, occurrence)
        UniqueConstraint(
            "workflow_id",
            "assigned_to",
            "due_date",
            name="uq_workflow_assignments_occurrence",
        ),
        CheckConstraint(
            "status IN ('pending', 'completed')",
            name="status_domain",
        ),
        # completed <=> completed_at stamped
        CheckConstraint(
            "(status = 'completed') = (completed_at IS NOT NULL)",
            name="completed_at_consistent",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    workflow_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("workflows.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    assigned_to: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    assigned_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AssignmentStatus.pending.value
    )

    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Optimistic concurrency token: bumped on every mutation
    row_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
