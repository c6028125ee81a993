# thepass/api/tasks.py

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from thepass.api.deps import get_current_profile
from thepass.core.db import get_db
from thepass.core.errors import NotFound
from thepass.core.rbac import Capability, ensure_allowed
from thepass.models.profile import Profile
from thepass.models.task import Task
from thepass.schemas.task import TaskCreate, TaskRead, TaskUpdate

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
def create_task(
    data: TaskCreate,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_allowed(Capability.MANAGE_WORKFLOWS, me.role)

    task = Task(
        title=data.title,
        description=data.description,
        photo_required=data.photo_required,
        notes_required=data.notes_required,
        created_by=me.id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.get("", response_model=list[TaskRead])
def list_tasks(
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return db.execute(select(Task).order_by(Task.created_at.desc())).scalars().all()


@router.get("/{task_id}", response_model=TaskRead)
def get_task(
    task_id: UUID,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    task = db.get(Task, task_id)
    if not task:
        raise NotFound("Task not found")
    return task


@router.patch("/{task_id}", response_model=TaskRead)
def update_task(
    task_id: UUID,
    payload: TaskUpdate,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    ensure_allowed(Capability.MANAGE_WORKFLOWS, me.role)

    task = db.get(Task, task_id)
    if not task:
        raise NotFound("Task not found")

    # Flag changes apply to future submissions only; existing completions are untouched
    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None or field == "description":
            setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return task
