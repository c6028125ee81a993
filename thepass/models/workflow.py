# thepass/models/workflow.py
from __future__ import annotations

import enum
from datetime import date, datetime, time
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from thepass.models.base import Base
from thepass.models.task import Task


class RecurrenceType(str, enum.Enum):
    once = "once"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class Workflow(Base):
    """Named, ordered collection of tasks (checklist template)."""

    __tablename__ = "workflows"
    __table_args__ = (
        CheckConstraint(
            "recurrence_type IN ('once', 'daily', 'weekly', 'monthly')",
            name="recurrence_type_domain",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_repeatable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    recurrence_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=RecurrenceType.once.value
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    due_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_by: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )

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

    workflow_tasks: Mapped[list["WorkflowTask"]] = relationship(
        "WorkflowTask",
        back_populates="workflow",
        order_by="WorkflowTask.order_index",
        cascade="all, delete-orphan",
    )


class WorkflowTask(Base):
    """Membership of a task in a workflow: position + required flag."""

    __tablename__ = "workflow_tasks"
    __table_args__ = (
        UniqueConstraint("workflow_id", "task_id", name="uq_workflow_tasks_workflow_task"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    workflow_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("workflows.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    task_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tasks.id", ondelete="RESTRICT"),
        nullable=False,
    )

    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    workflow: Mapped[Workflow] = relationship("Workflow", back_populates="workflow_tasks")
    task: Mapped[Task] = relationship("Task", lazy="joined")
