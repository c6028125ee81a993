# thepass/schemas/completion.py

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field

from thepass.schemas.base import ORMModel, StrictBaseModel


class TaskCompletionCreate(StrictBaseModel):
    task_id: UUID
    notes: str | None = Field(default=None, max_length=5000)
    # URL returned by object storage; the photo itself is uploaded elsewhere
    photo_url: str | None = Field(default=None, max_length=2048)


class TaskCompletionEdit(StrictBaseModel):
    notes: str = Field(min_length=1, max_length=5000)


class TaskCompletionRead(ORMModel):
    id: UUID
    assignment_id: UUID
    task_id: UUID
    completed_by: UUID
    notes: str | None = None
    photo_url: str | None = None
    completed_at: datetime
    edited_by: UUID | None = None
    edited_at: datetime | None = None
    edit_history: list[dict[str, Any]] = []


class CompleteTaskResponse(StrictBaseModel):
    completion: TaskCompletionRead
    workflow_completed: bool
