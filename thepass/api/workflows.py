# thepass/api/workflows.py

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from thepass.api.deps import get_current_profile
from thepass.core.db import get_db
from thepass.core.errors import DomainError
from thepass.models.profile import Profile
from thepass.models.workflow import Workflow
from thepass.schemas.workflow import WorkflowCreate, WorkflowRead, WorkflowUpdate
from thepass.services.workflow_service import WorkflowService

router = APIRouter(prefix="/workflows", tags=["workflows"])

WORKFLOW_CREATE_OPENAPI_EXAMPLES = {
    "opening_checklist": {
        "summary": "FOH opening checklist",
        "description": "Два обязательных пункта: фото витрины и заметка по кассе.",
        "value": {
            "name": "FOH Opening",
            "description": "Before doors open",
            "is_repeatable": True,
            "recurrence_type": "daily",
            "due_time": "10:30:00",
            "tasks": [
                {"task_id": "55555555-5555-5555-5555-555555555555", "order_index": 0, "is_required": True},
                {"task_id": "66666666-6666-6666-6666-666666666666", "order_index": 1, "is_required": True},
            ],
        },
    }
}


@router.post("", response_model=WorkflowRead, status_code=status.HTTP_201_CREATED)
def create_workflow(
    data: WorkflowCreate = Body(..., openapi_examples=WORKFLOW_CREATE_OPENAPI_EXAMPLES),
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        wf = WorkflowService(db).create_workflow(
            actor=me,
            name=data.name,
            description=data.description,
            is_repeatable=data.is_repeatable,
            recurrence_type=data.recurrence_type.value,
            due_date=data.due_date,
            due_time=data.due_time,
            tasks=[t.model_dump(exclude_none=True) for t in data.tasks],
        )
        db.commit()
    except DomainError:
        db.rollback()
        raise

    db.refresh(wf)
    return wf


@router.get("", response_model=list[WorkflowRead])
def list_workflows(
    include_inactive: bool = Query(False),
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    q = select(Workflow)
    if not include_inactive:
        q = q.where(Workflow.is_active.is_(True))
    return db.execute(q.order_by(Workflow.created_at.desc())).scalars().all()


@router.get("/{workflow_id}", response_model=WorkflowRead)
def get_workflow(
    workflow_id: UUID,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return WorkflowService(db).get_workflow(workflow_id)


@router.patch("/{workflow_id}", response_model=WorkflowRead)
def update_workflow(
    workflow_id: UUID,
    data: WorkflowUpdate,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True)
    if "recurrence_type" in changes and changes["recurrence_type"] is not None:
        changes["recurrence_type"] = changes["recurrence_type"].value

    try:
        wf = WorkflowService(db).update_workflow(actor=me, workflow_id=workflow_id, changes=changes)
        db.commit()
    except DomainError:
        db.rollback()
        raise

    db.refresh(wf)
    return wf
