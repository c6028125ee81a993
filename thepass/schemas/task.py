# thepass/schemas/task.py

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from thepass.schemas.base import ORMModel, StrictBaseModel


class TaskCreate(StrictBaseModel):
    title: str = Field(min_length=1, max_length=300)
    description: str | None = None
    photo_required: bool = False
    notes_required: bool = False


class TaskUpdate(StrictBaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    description: Optional[str] = None
    photo_required: Optional[bool] = None
    notes_required: Optional[bool] = None


class TaskRead(ORMModel):
    id: UUID
    title: str
    description: str | None = None
    photo_required: bool
    notes_required: bool
    created_by: UUID | None = None
    created_at: datetime
    updated_at: datetime
