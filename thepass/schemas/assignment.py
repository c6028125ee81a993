# thepass/schemas/assignment.py

from datetime import date, datetime
from uuid import UUID

from thepass.models.workflow_assignment import AssignmentStatus
from thepass.schemas.base import ORMModel, StrictBaseModel
from thepass.schemas.completion import TaskCompletionRead


class AssignmentCreate(StrictBaseModel):
    workflow_id: UUID
    assigned_to: UUID
    # None -> derived from workflow recurrence / due_date / today
    due_date: date | None = None


class AssignmentRead(ORMModel):
    id: UUID
    workflow_id: UUID
    assigned_to: UUID
    assigned_by: UUID | None = None
    due_date: date
    status: AssignmentStatus
    assigned_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    row_version: int


class AssignmentDetail(AssignmentRead):
    required_total: int
    required_completed: int
    completions: list[TaskCompletionRead] = []
