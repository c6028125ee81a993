# thepass/models/task_completion.py
from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Text, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from thepass.models.base import Base, JSONType


class TaskCompletion(Base):
    """Evidence that one task of one assignment was finished. Write-once per pair."""

    __tablename__ = "task_completions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "task_id", name="uq_task_completions_assignment_task"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    assignment_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("workflow_assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    task_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tasks.id", ondelete="RESTRICT"),
        nullable=False,
    )

    completed_by: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="RESTRICT"),
        nullable=False,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # Manager corrections
    edited_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    edited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # [{edited_by, edited_at, previous_notes, new_notes}, ...]
    edit_history: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
