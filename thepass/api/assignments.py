# thepass/api/assignments.py

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from thepass.api.deps import get_current_profile
from thepass.core.db import get_db
from thepass.core.errors import DomainError, Forbidden, NotFound
from thepass.core.rbac import Capability, has_capability
from thepass.models.profile import Profile
from thepass.models.workflow_assignment import AssignmentStatus, WorkflowAssignment
from thepass.schemas.assignment import AssignmentCreate, AssignmentDetail, AssignmentRead
from thepass.schemas.completion import (
    CompleteTaskResponse,
    TaskCompletionCreate,
    TaskCompletionRead,
)
from thepass.services import task_completion_service as completions
from thepass.services.workflow_service import WorkflowService

router = APIRouter(prefix="/workflow-assignments", tags=["assignments"])

COMPLETE_TASK_OPENAPI_EXAMPLES = {
    "photo": {
        "summary": "Complete a photo task",
        "description": "photo_url приходит из object storage (загрузка фото вне этого API).",
        "value": {
            "task_id": "55555555-5555-5555-5555-555555555555",
            "photo_url": "https://storage.example.com/task-photos/line-check.jpg",
        },
    },
    "notes": {
        "summary": "Complete a notes task",
        "value": {
            "task_id": "66666666-6666-6666-6666-666666666666",
            "notes": "Till counted, $200 float",
        },
    },
}


def _load_visible(db: Session, assignment_id: UUID, viewer: Profile) -> WorkflowAssignment:
    assignment = db.get(WorkflowAssignment, assignment_id)
    if assignment is None:
        raise NotFound("Assignment not found")
    if assignment.assigned_to != viewer.id and not has_capability(viewer.role, Capability.VIEW_ALL_ASSIGNMENTS):
        raise Forbidden("Not allowed to view this assignment")
    return assignment


@router.post("", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
def create_assignment(
    data: AssignmentCreate,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        assignment = WorkflowService(db).assign_workflow(
            actor=me,
            workflow_id=data.workflow_id,
            assigned_to=data.assigned_to,
            due_date=data.due_date,
        )
        db.commit()
    except DomainError:
        db.rollback()
        raise

    db.refresh(assignment)
    return assignment


@router.get("", response_model=list[AssignmentRead])
def list_assignments(
    status_: AssignmentStatus | None = Query(None, alias="status"),
    workflow_id: UUID | None = Query(None),
    assigned_to: UUID | None = Query(None),
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    q = select(WorkflowAssignment)

    # Non-managers only ever see their own assignments
    if not has_capability(me.role, Capability.VIEW_ALL_ASSIGNMENTS):
        q = q.where(WorkflowAssignment.assigned_to == me.id)
    elif assigned_to is not None:
        q = q.where(WorkflowAssignment.assigned_to == assigned_to)

    if status_ is not None:
        q = q.where(WorkflowAssignment.status == status_.value)
    if workflow_id is not None:
        q = q.where(WorkflowAssignment.workflow_id == workflow_id)

    return db.execute(q.order_by(WorkflowAssignment.assigned_at.desc())).scalars().all()


@router.get("/{assignment_id}", response_model=AssignmentDetail)
def get_assignment(
    assignment_id: UUID,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    assignment = _load_visible(db, assignment_id, me)

    required = completions.required_task_ids(db, assignment.workflow_id)
    rows = completions.list_completions(db, assignment.id)
    done = {c.task_id for c in rows}

    return AssignmentDetail(
        **AssignmentRead.model_validate(assignment).model_dump(),
        required_total=len(required),
        required_completed=len(required & done),
        completions=[TaskCompletionRead.model_validate(c) for c in rows],
    )


@router.get("/{assignment_id}/completions", response_model=list[TaskCompletionRead])
def list_assignment_completions(
    assignment_id: UUID,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    assignment = _load_visible(db, assignment_id, me)
    return completions.list_completions(db, assignment.id)


@router.post(
    "/{assignment_id}/completions",
    response_model=CompleteTaskResponse,
    status_code=status.HTTP_201_CREATED,
)
def complete_task(
    assignment_id: UUID,
    data: TaskCompletionCreate = Body(..., openapi_examples=COMPLETE_TASK_OPENAPI_EXAMPLES),
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        completion, workflow_completed = completions.complete_task(
            db,
            assignment_id=assignment_id,
            task_id=data.task_id,
            acting_user_id=me.id,
            notes=data.notes,
            photo_url=data.photo_url,
        )
        db.commit()
    except DomainError:
        db.rollback()
        raise

    return CompleteTaskResponse(
        completion=TaskCompletionRead.model_validate(completion),
        workflow_completed=workflow_completed,
    )
