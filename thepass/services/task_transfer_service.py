# thepass/services/task_transfer_service.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from thepass.core.errors import (
    Conflict,
    Forbidden,
    InvalidRequest,
    InvalidState,
    NotFound,
    TransferStageClosed,
    VersionConflict,
)
from thepass.core.rbac import Capability, has_capability
from thepass.fsm.transfer_fsm import (
    EFFECT_REASSIGN,
    Action,
    apply_transition,
    required_status,
)
from thepass.models.profile import Profile
from thepass.models.task_transfer import ACTIVE_TRANSFER_STATUSES, TaskTransfer, TransferStatus
from thepass.models.task_transfer_event import TaskTransferEvent
from thepass.models.workflow_assignment import AssignmentStatus, WorkflowAssignment

logger = logging.getLogger(__name__)

ACTION_REQUEST = "request"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _clean(text: str | None) -> str | None:
    if text is None or not text.strip():
        return None
    return text.strip()


class TaskTransferService:
    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Initiate
    # ------------------------------------------------------------------

    def request_transfer(
        self,
        *,
        assignment_id: UUID,
        from_user_id: UUID,
        to_user_id: UUID,
        reason: str | None = None,
    ) -> TaskTransfer:
        assignment = self.db.execute(
            select(WorkflowAssignment)
            .where(WorkflowAssignment.id == assignment_id)
            .with_for_update()
        ).scalar_one_or_none()
        if assignment is None:
            raise NotFound("Assignment not found")

        if assignment.assigned_to != from_user_id:
            raise Forbidden("Only the current assignee can request a transfer")

        if assignment.status == AssignmentStatus.completed.value:
            raise InvalidState("Cannot transfer completed tasks")

        if to_user_id == from_user_id:
            raise InvalidRequest("Cannot transfer a task to yourself")

        target = self.db.get(Profile, to_user_id)
        if target is None or target.is_archived:
            raise NotFound("Target user not found")

        if self._active_transfer_id(assignment.id) is not None:
            raise Conflict("A transfer request is already pending for this task")

        transfer = TaskTransfer(
            assignment_id=assignment.id,
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            requested_by=from_user_id,
            transfer_reason=_clean(reason),
            status=TransferStatus.pending_transferee.value,
            requested_at=_now(),
            row_version=1,
        )
        self.db.add(transfer)

        try:
            self.db.flush()
        except IntegrityError as e:
            # partial unique index on active transfers: concurrent request won
            raise Conflict("A transfer request is already pending for this task") from e

        self._record_event(
            transfer,
            actor_user_id=from_user_id,
            action=ACTION_REQUEST,
            from_status=None,
            payload={"reason": transfer.transfer_reason},
        )
        self.db.flush()

        logger.info(
            "Transfer requested id=%s assignment=%s from=%s to=%s",
            transfer.id,
            assignment.id,
            from_user_id,
            to_user_id,
        )
        return transfer

    # ------------------------------------------------------------------
    # Responses
    # ------------------------------------------------------------------

    def respond_as_transferee(
        self,
        *,
        transfer_id: UUID,
        actor: Profile,
        approve: bool,
        response_text: str | None = None,
        expected_row_version: int | None = None,
    ) -> TaskTransfer:
        action = Action.TRANSFEREE_APPROVE if approve else Action.TRANSFEREE_REJECT
        transfer = self._load_for_transition(transfer_id, action)

        if transfer.to_user_id != actor.id:
            raise Forbidden("Only the recipient can respond at this stage")

        self._check_version(transfer, expected_row_version)

        now = _now()
        transfer.transferee_response = _clean(response_text)
        transfer.transferee_responded_at = now

        return self._transition(transfer, actor=actor, action=action, response_text=response_text)

    def respond_as_manager(
        self,
        *,
        transfer_id: UUID,
        actor: Profile,
        approve: bool,
        response_text: str | None = None,
        expected_row_version: int | None = None,
    ) -> TaskTransfer:
        action = Action.MANAGER_APPROVE if approve else Action.MANAGER_REJECT
        transfer = self._load_for_transition(transfer_id, action)

        if not has_capability(actor.role, Capability.APPROVE_TRANSFERS):
            raise Forbidden("Manager approval required")

        self._check_version(transfer, expected_row_version)

        now = _now()
        transfer.manager_id = actor.id
        transfer.manager_response = _clean(response_text)
        transfer.manager_responded_at = now

        return self._transition(transfer, actor=actor, action=action, response_text=response_text)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, transfer_id: UUID) -> TaskTransfer:
        transfer = self.db.get(TaskTransfer, transfer_id)
        if transfer is None:
            raise NotFound("Transfer request not found")
        return transfer

    def get_visible(self, transfer_id: UUID, viewer: Profile) -> TaskTransfer:
        transfer = self.get(transfer_id)
        involved = viewer.id in (transfer.from_user_id, transfer.to_user_id)
        if not involved and not has_capability(viewer.role, Capability.APPROVE_TRANSFERS):
            raise Forbidden("Not allowed to view this transfer")
        return transfer

    def list_for(self, viewer: Profile, *, status: str | None = None) -> list[TaskTransfer]:
        """Read-time projection of which transfers a profile should see."""
        q = select(TaskTransfer)

        if has_capability(viewer.role, Capability.APPROVE_TRANSFERS):
            q = q.where(
                or_(
                    TaskTransfer.status == TransferStatus.pending_manager.value,
                    and_(
                        TaskTransfer.status == TransferStatus.pending_transferee.value,
                        TaskTransfer.to_user_id == viewer.id,
                    ),
                )
            )
        else:
            q = q.where(
                or_(
                    TaskTransfer.from_user_id == viewer.id,
                    TaskTransfer.to_user_id == viewer.id,
                )
            )

        if status is not None:
            q = q.where(TaskTransfer.status == status)

        return list(self.db.execute(q.order_by(TaskTransfer.requested_at.desc())).scalars().all())

    def list_events(self, transfer_id: UUID) -> list[TaskTransferEvent]:
        return list(
            self.db.execute(
                select(TaskTransferEvent)
                .where(TaskTransferEvent.transfer_id == transfer_id)
                .order_by(TaskTransferEvent.result_row_version.asc())
            ).scalars().all()
        )

    # ------------------------------------------------------------------
    # internals
    # ------------------------------------------------------------------

    def _active_transfer_id(self, assignment_id: UUID) -> UUID | None:
        return self.db.execute(
            select(TaskTransfer.id).where(
                TaskTransfer.assignment_id == assignment_id,
                TaskTransfer.status.in_(ACTIVE_TRANSFER_STATUSES),
            )
        ).scalar_one_or_none()

    def _load_for_transition(self, transfer_id: UUID, action: Action) -> TaskTransfer:
        transfer = self.db.execute(
            select(TaskTransfer).where(TaskTransfer.id == transfer_id).with_for_update()
        ).scalar_one_or_none()
        if transfer is None:
            raise NotFound("Transfer request not found")

        # State gate first: terminal transfers reject every caller the same way
        expected = required_status(action)
        if transfer.status != expected.value:
            raise TransferStageClosed(
                f"Transfer is '{transfer.status}', expected '{expected.value}'"
            )
        return transfer

    @staticmethod
    def _check_version(transfer: TaskTransfer, expected_row_version: int | None) -> None:
        if expected_row_version is not None and transfer.row_version != expected_row_version:
            raise VersionConflict(
                f"Expected row_version={expected_row_version}, actual={transfer.row_version}"
            )

    def _transition(
        self,
        transfer: TaskTransfer,
        *,
        actor: Profile,
        action: Action,
        response_text: str | None,
    ) -> TaskTransfer:
        from_status = TransferStatus(transfer.status)
        to_status, side_effects = apply_transition(
            from_status,
            action.value,
            payload={"to_user_id": transfer.to_user_id},
        )

        for eff in side_effects:
            if eff.kind == EFFECT_REASSIGN:
                self._reassign(transfer.assignment_id, eff.payload["to_user_id"])

        transfer.status = to_status.value
        transfer.row_version += 1

        self._record_event(
            transfer,
            actor_user_id=actor.id,
            action=action.value,
            from_status=from_status.value,
            payload={"response": _clean(response_text)},
        )
        self.db.flush()

        logger.info(
            "Transfer %s id=%s %s -> %s by=%s",
            action.value,
            transfer.id,
            from_status.value,
            to_status.value,
            actor.id,
        )
        return transfer

    def _reassign(self, assignment_id: UUID, to_user_id: UUID) -> None:
        assignment = self.db.execute(
            select(WorkflowAssignment)
            .where(WorkflowAssignment.id == assignment_id)
            .with_for_update()
        ).scalar_one_or_none()
        if assignment is None:
            raise NotFound("Assignment not found")

        # Reopening a finished assignment would break the completion roll-up
        if assignment.status == AssignmentStatus.completed.value:
            raise InvalidState("Assignment was completed before the transfer was approved")

        assignment.assigned_to = to_user_id
        assignment.status = AssignmentStatus.pending.value
        assignment.started_at = None
        assignment.row_version += 1

    def _record_event(
        self,
        transfer: TaskTransfer,
        *,
        actor_user_id: UUID,
        action: str,
        from_status: str | None,
        payload: dict,
    ) -> None:
        self.db.add(
            TaskTransferEvent(
                transfer_id=transfer.id,
                actor_user_id=actor_user_id,
                action=action,
                from_status=from_status,
                to_status=transfer.status,
                payload=dict(payload),
                result_row_version=transfer.row_version,
                created_at=_now(),
            )
        )
