# thepass/services/task_completion_service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from thepass.core.errors import (
    AlreadyCompleted,
    Forbidden,
    InvalidState,
    MissingNotes,
    MissingPhoto,
    NotFound,
)
from thepass.core.rbac import Capability, ensure_allowed
from thepass.models.profile import Profile
from thepass.models.task_completion import TaskCompletion
from thepass.models.workflow import WorkflowTask
from thepass.models.workflow_assignment import AssignmentStatus, WorkflowAssignment

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def required_task_ids(db: Session, workflow_id: UUID) -> set[UUID]:
    return set(
        db.execute(
            select(WorkflowTask.task_id).where(
                WorkflowTask.workflow_id == workflow_id,
                WorkflowTask.is_required.is_(True),
            )
        ).scalars().all()
    )


def completed_task_ids(db: Session, assignment_id: UUID) -> set[UUID]:
    return set(
        db.execute(
            select(TaskCompletion.task_id).where(TaskCompletion.assignment_id == assignment_id)
        ).scalars().all()
    )


def workflow_is_complete(required: set[UUID], completed: set[UUID]) -> bool:
    return required <= completed


def _load_assignment_for_update(db: Session, assignment_id: UUID) -> WorkflowAssignment | None:
    # Row lock serialises concurrent completions of the same assignment
    return db.execute(
        select(WorkflowAssignment)
        .where(WorkflowAssignment.id == assignment_id)
        .with_for_update()
    ).scalar_one_or_none()


def complete_task(
    db: Session,
    *,
    assignment_id: UUID,
    task_id: UUID,
    acting_user_id: UUID,
    notes: str | None = None,
    photo_url: str | None = None,
) -> tuple[TaskCompletion, bool]:
    """Record one task completion and roll the assignment up.

    Returns (completion, workflow_completed). Does not commit: the caller owns
    the transaction so insert + status update land together.
    """

    # 1) Assignment + ownership
    assignment = _load_assignment_for_update(db, assignment_id)
    if assignment is None:
        raise NotFound("Assignment not found")

    if assignment.assigned_to != acting_user_id:
        raise Forbidden("Assignment is not assigned to you")

    if assignment.status == AssignmentStatus.completed.value:
        raise InvalidState("Workflow is already completed")

    # 2) Task must be part of this workflow
    link: WorkflowTask | None = db.execute(
        select(WorkflowTask).where(
            WorkflowTask.workflow_id == assignment.workflow_id,
            WorkflowTask.task_id == task_id,
        )
    ).scalar_one_or_none()

    if link is None:
        raise InvalidState("Task is not part of this workflow")

    # 3) Evidence requirements
    if link.task.photo_required and _blank(photo_url):
        raise MissingPhoto("Photo is required for this task")

    if link.task.notes_required and _blank(notes):
        raise MissingNotes("Notes are required for this task")

    # 4) Write-once per (assignment, task)
    existing = db.execute(
        select(TaskCompletion.id).where(
            TaskCompletion.assignment_id == assignment.id,
            TaskCompletion.task_id == task_id,
        )
    ).scalar_one_or_none()

    if existing is not None:
        raise AlreadyCompleted("Task is already completed")

    now = _now()
    completion = TaskCompletion(
        assignment_id=assignment.id,
        task_id=task_id,
        completed_by=acting_user_id,
        notes=None if _blank(notes) else notes,
        photo_url=None if _blank(photo_url) else photo_url,
        completed_at=now,
        edit_history=[],
    )
    db.add(completion)

    try:
        db.flush()
    except IntegrityError as e:
        # unique(assignment_id, task_id): lost a race with a concurrent submit
        raise AlreadyCompleted("Task is already completed") from e

    if assignment.started_at is None:
        assignment.started_at = now

    # 5) Roll-up: re-derive from persisted rows, no counters
    done = workflow_is_complete(
        required_task_ids(db, assignment.workflow_id),
        completed_task_ids(db, assignment.id),
    )
    if done:
        assignment.status = AssignmentStatus.completed.value
        assignment.completed_at = now

    assignment.row_version += 1
    db.flush()

    logger.info(
        "Task completed assignment=%s task=%s by=%s workflow_completed=%s",
        assignment.id,
        task_id,
        acting_user_id,
        done,
    )
    return completion, done


def edit_completion(
    db: Session,
    *,
    completion_id: UUID,
    actor: Profile,
    notes: str,
) -> TaskCompletion:
    """Manager correction of completion notes; keeps an audit trail in edit_history."""
    ensure_allowed(Capability.EDIT_COMPLETIONS, actor.role)

    completion = db.get(TaskCompletion, completion_id)
    if completion is None:
        raise NotFound("Task completion not found")

    now = _now()
    entry = {
        "edited_by": str(actor.id),
        "edited_at": now.isoformat(),
        "previous_notes": completion.notes,
        "new_notes": notes,
    }

    # new list object so the JSON column is flagged dirty
    completion.edit_history = [*(completion.edit_history or []), entry]
    completion.notes = notes
    completion.edited_by = actor.id
    completion.edited_at = now

    db.flush()

    logger.info("Task completion edited id=%s by=%s", completion.id, actor.id)
    return completion


def list_completions(db: Session, assignment_id: UUID) -> list[TaskCompletion]:
    return list(
        db.execute(
            select(TaskCompletion)
            .where(TaskCompletion.assignment_id == assignment_id)
            .order_by(TaskCompletion.completed_at.asc())
        ).scalars().all()
    )
