# thepass/services/workflow_service.py
from __future__ import annotations

import calendar
import logging
from datetime import date, time, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from thepass.core.errors import Conflict, InvalidRequest, InvalidState, NotFound
from thepass.core.rbac import Capability, ensure_allowed
from thepass.models.profile import Profile
from thepass.models.task import Task
from thepass.models.workflow import RecurrenceType, Workflow, WorkflowTask
from thepass.models.workflow_assignment import AssignmentStatus, WorkflowAssignment

logger = logging.getLogger(__name__)


def _add_month(d: date) -> date:
    year = d.year + (1 if d.month == 12 else 0)
    month = 1 if d.month == 12 else d.month + 1
    last_day = calendar.monthrange(year, month)[1]
    return d.replace(year=year, month=month, day=min(d.day, last_day))


def next_due_date(recurrence_type: str, today: date) -> date:
    """Next occurrence after `today` for a repeatable workflow.

    monthly keeps the day of month, clamped to the last day (Jan 31 -> Feb 28/29).
    """
    rt = RecurrenceType(recurrence_type)
    if rt is RecurrenceType.daily:
        return today + timedelta(days=1)
    if rt is RecurrenceType.weekly:
        return today + timedelta(days=7)
    if rt is RecurrenceType.monthly:
        return _add_month(today)
    return today


def resolve_due_date(workflow: Workflow, explicit: date | None, today: date) -> date:
    if explicit is not None:
        return explicit
    if workflow.is_repeatable:
        return next_due_date(workflow.recurrence_type, today)
    if workflow.due_date is not None:
        return workflow.due_date
    return today


class WorkflowService:
    def __init__(self, db: Session):
        self.db = db

    def create_workflow(
        self,
        *,
        actor: Profile,
        name: str,
        description: str | None,
        is_repeatable: bool,
        recurrence_type: str,
        due_date: date | None,
        due_time: time | None,
        tasks: list[dict],  # [{"task_id": UUID, "order_index": int, "is_required": bool}]
    ) -> Workflow:
        ensure_allowed(Capability.MANAGE_WORKFLOWS, actor.role)

        if not tasks:
            raise InvalidRequest("Workflow must contain at least one task")

        task_ids = [item["task_id"] for item in tasks]
        if len(set(task_ids)) != len(task_ids):
            raise InvalidRequest("A task can appear only once per workflow")

        if not any(item.get("is_required", True) for item in tasks):
            raise InvalidRequest("Workflow must contain at least one required task")

        found = set(self.db.execute(select(Task.id).where(Task.id.in_(task_ids))).scalars().all())
        missing = [str(t) for t in task_ids if t not in found]
        if missing:
            raise NotFound(f"Task not found: {', '.join(missing)}")

        wf = Workflow(
            name=name,
            description=description,
            is_repeatable=is_repeatable,
            recurrence_type=recurrence_type,
            due_date=due_date,
            due_time=due_time,
            is_active=True,
            created_by=actor.id,
        )
        for pos, item in enumerate(tasks):
            wf.workflow_tasks.append(
                WorkflowTask(
                    task_id=item["task_id"],
                    order_index=item.get("order_index", pos),
                    is_required=item.get("is_required", True),
                )
            )

        self.db.add(wf)
        self.db.flush()

        logger.info("Workflow created id=%s tasks=%s by=%s", wf.id, len(tasks), actor.id)
        return wf

    def get_workflow(self, workflow_id: UUID) -> Workflow:
        wf = self.db.get(Workflow, workflow_id)
        if wf is None:
            raise NotFound("Workflow not found")
        return wf

    def update_workflow(self, *, actor: Profile, workflow_id: UUID, changes: dict) -> Workflow:
        """Metadata only: the task list is fixed once assignments may exist."""
        ensure_allowed(Capability.MANAGE_WORKFLOWS, actor.role)
        wf = self.get_workflow(workflow_id)

        for field in ("description", "due_date", "due_time"):
            if field in changes:
                setattr(wf, field, changes[field])

        # NOT NULL columns: explicit null means "leave as is"
        for field in ("name", "is_repeatable", "recurrence_type", "is_active"):
            if changes.get(field) is not None:
                setattr(wf, field, changes[field])

        if wf.is_repeatable == (wf.recurrence_type == RecurrenceType.once.value):
            raise InvalidRequest("Repeatable workflows need a daily/weekly/monthly recurrence_type")

        self.db.flush()
        logger.info("Workflow updated id=%s fields=%s by=%s", wf.id, sorted(changes), actor.id)
        return wf

    def assign_workflow(
        self,
        *,
        actor: Profile,
        workflow_id: UUID,
        assigned_to: UUID,
        due_date: date | None,
        today: date | None = None,
    ) -> WorkflowAssignment:
        ensure_allowed(Capability.MANAGE_WORKFLOWS, actor.role)

        wf = self.get_workflow(workflow_id)
        if not wf.is_active:
            raise InvalidState("Workflow is inactive")

        assignee = self.db.get(Profile, assigned_to)
        if assignee is None or assignee.is_archived:
            raise NotFound("Assignee not found")

        assignment = WorkflowAssignment(
            workflow_id=wf.id,
            assigned_to=assignee.id,
            assigned_by=actor.id,
            due_date=resolve_due_date(wf, due_date, today or date.today()),
            status=AssignmentStatus.pending.value,
            row_version=1,
        )
        self.db.add(assignment)

        try:
            self.db.flush()
        except IntegrityError as e:
            raise Conflict("Workflow is already assigned to this employee for that due date") from e

        logger.info(
            "Workflow assigned assignment=%s workflow=%s to=%s due=%s",
            assignment.id,
            wf.id,
            assignee.id,
            assignment.due_date,
        )
        return assignment
