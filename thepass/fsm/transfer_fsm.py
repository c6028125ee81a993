# thepass/fsm/transfer_fsm.py
"""Task transfer FSM: two-stage approval chain.

  pending_transferee -> pending_manager -> approved
  pending_transferee -> rejected
  pending_manager    -> rejected

Statuses never regress; approved/rejected are terminal.
Who may act at a given stage (transferee vs manager) is checked by the
service layer, the FSM only knows about statuses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from thepass.core.errors import InvalidState
from thepass.models.task_transfer import TransferStatus


class TransitionNotAllowed(InvalidState):
    pass


class Action(str, Enum):
    # stage 1: recipient answers
    TRANSFEREE_APPROVE = "transferee_approve"  # pending_transferee -> pending_manager
    TRANSFEREE_REJECT = "transferee_reject"  # pending_transferee -> rejected

    # stage 2: manager answers
    MANAGER_APPROVE = "manager_approve"  # pending_manager -> approved (+ reassign)
    MANAGER_REJECT = "manager_reject"  # pending_manager -> rejected


@dataclass(frozen=True)
class SideEffect:
    """Declarative side effects for the service layer to execute."""

    kind: str
    payload: dict[str, Any]


EFFECT_REASSIGN = "reassign_assignment"

TERMINAL = {
    TransferStatus.approved,
    TransferStatus.rejected,
}


# action -> allowed from statuses + to status
TRANSITIONS: dict[Action, tuple[set[TransferStatus], TransferStatus]] = {
    Action.TRANSFEREE_APPROVE: ({TransferStatus.pending_transferee}, TransferStatus.pending_manager),
    Action.TRANSFEREE_REJECT: ({TransferStatus.pending_transferee}, TransferStatus.rejected),

    Action.MANAGER_APPROVE: ({TransferStatus.pending_manager}, TransferStatus.approved),
    Action.MANAGER_REJECT: ({TransferStatus.pending_manager}, TransferStatus.rejected),
}


def required_status(action: Action) -> TransferStatus:
    (allowed_from,) = TRANSITIONS[action][0]
    return allowed_from


def apply_transition(
    current: TransferStatus,
    action_raw: str,
    *,
    payload: dict[str, Any] | None = None,
) -> tuple[TransferStatus, list[SideEffect]]:
    """Returns (new_status, side_effects).

    Side effects are executed by the service layer in the same DB transaction.
    """

    payload = payload or {}
    action_raw = action_raw.strip()

    try:
        action = Action(action_raw)
    except ValueError:
        allowed = ", ".join(a.value for a in Action)
        raise TransitionNotAllowed(f"Unknown action: '{action_raw}'. Allowed actions: {allowed}")

    if current in TERMINAL:
        raise TransitionNotAllowed(
            f"Transfer is already '{current.value}'; no further changes are allowed."
        )

    allowed_from, to_status = TRANSITIONS[action]
    if current not in allowed_from:
        allowed_from_str = ", ".join(sorted(s.value for s in allowed_from))
        raise TransitionNotAllowed(
            f"Action '{action.value}' not allowed from status '{current.value}'. "
            f"Allowed from: {allowed_from_str}."
        )

    side_effects: list[SideEffect] = []

    if action is Action.MANAGER_APPROVE:
        side_effects.append(
            SideEffect(
                kind=EFFECT_REASSIGN,
                payload={"to_user_id": payload.get("to_user_id")},
            )
        )

    return to_status, side_effects
