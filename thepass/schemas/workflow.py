# thepass/schemas/workflow.py

from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from thepass.models.workflow import RecurrenceType
from thepass.schemas.base import ORMModel, StrictBaseModel
from thepass.schemas.task import TaskRead


class WorkflowTaskIn(StrictBaseModel):
    task_id: UUID
    order_index: int | None = Field(default=None, ge=0)
    is_required: bool = True


class WorkflowCreate(StrictBaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    is_repeatable: bool = False
    recurrence_type: RecurrenceType = RecurrenceType.once
    due_date: date | None = None
    due_time: time | None = None
    tasks: list[WorkflowTaskIn] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_recurrence(self):
        if self.is_repeatable and self.recurrence_type == RecurrenceType.once:
            raise ValueError("recurrence_type must be daily/weekly/monthly when is_repeatable=true")
        if not self.is_repeatable and self.recurrence_type != RecurrenceType.once:
            raise ValueError("recurrence_type other than 'once' requires is_repeatable=true")
        return self


class WorkflowUpdate(StrictBaseModel):
    """Metadata only. The task list cannot change after creation."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    is_repeatable: Optional[bool] = None
    recurrence_type: Optional[RecurrenceType] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    is_active: Optional[bool] = None


class WorkflowTaskRead(ORMModel):
    task_id: UUID
    order_index: int
    is_required: bool
    task: TaskRead


class WorkflowRead(ORMModel):
    id: UUID
    name: str
    description: str | None = None
    is_repeatable: bool
    recurrence_type: RecurrenceType
    due_date: date | None = None
    due_time: time | None = None
    is_active: bool
    created_by: UUID | None = None
    created_at: datetime
    workflow_tasks: list[WorkflowTaskRead] = []
