# tests/test_transfer_fsm.py
"""
Pure FSM tests for task transfers (no DB).

- every allowed edge of the approval chain
- terminal statuses reject every action
- manager approval emits the reassignment side effect
"""

from __future__ import annotations

import uuid

import pytest

from thepass.core.errors import InvalidState
from thepass.fsm.transfer_fsm import (
    EFFECT_REASSIGN,
    TERMINAL,
    TRANSITIONS,
    Action,
    TransitionNotAllowed,
    apply_transition,
    required_status,
)
from thepass.models.task_transfer import TransferStatus


@pytest.mark.parametrize(
    "current, action, expected",
    [
        (TransferStatus.pending_transferee, Action.TRANSFEREE_APPROVE, TransferStatus.pending_manager),
        (TransferStatus.pending_transferee, Action.TRANSFEREE_REJECT, TransferStatus.rejected),
        (TransferStatus.pending_manager, Action.MANAGER_APPROVE, TransferStatus.approved),
        (TransferStatus.pending_manager, Action.MANAGER_REJECT, TransferStatus.rejected),
    ],
)
def test_allowed_transitions(current, action, expected):
    to_status, _ = apply_transition(current, action.value, payload={"to_user_id": uuid.uuid4()})
    assert to_status is expected


@pytest.mark.parametrize("current", sorted(TERMINAL, key=lambda s: s.value))
@pytest.mark.parametrize("action", list(Action))
def test_terminal_statuses_reject_everything(current, action):
    with pytest.raises(TransitionNotAllowed):
        apply_transition(current, action.value)


def test_manager_stage_cannot_skip_transferee():
    with pytest.raises(TransitionNotAllowed):
        apply_transition(TransferStatus.pending_transferee, Action.MANAGER_APPROVE.value)


def test_transferee_cannot_answer_twice():
    with pytest.raises(TransitionNotAllowed):
        apply_transition(TransferStatus.pending_manager, Action.TRANSFEREE_REJECT.value)


def test_unknown_action_lists_allowed():
    with pytest.raises(TransitionNotAllowed) as ei:
        apply_transition(TransferStatus.pending_transferee, "teleport")
    assert "manager_approve" in ei.value.message


def test_transition_error_is_invalid_state():
    # rendered with kind invalid_state by the API
    assert issubclass(TransitionNotAllowed, InvalidState)
    assert TransitionNotAllowed.kind == "invalid_state"


def test_only_manager_approve_reassigns():
    target = uuid.uuid4()

    _, effects = apply_transition(
        TransferStatus.pending_manager,
        Action.MANAGER_APPROVE.value,
        payload={"to_user_id": target},
    )
    assert [e.kind for e in effects] == [EFFECT_REASSIGN]
    assert effects[0].payload["to_user_id"] == target

    for current, action in [
        (TransferStatus.pending_transferee, Action.TRANSFEREE_APPROVE),
        (TransferStatus.pending_transferee, Action.TRANSFEREE_REJECT),
        (TransferStatus.pending_manager, Action.MANAGER_REJECT),
    ]:
        _, effects = apply_transition(current, action.value, payload={"to_user_id": target})
        assert effects == []


def test_no_transition_leads_back_to_an_earlier_stage():
    order = [
        TransferStatus.pending_transferee,
        TransferStatus.pending_manager,
    ]
    for allowed_from, to_status in TRANSITIONS.values():
        for src in allowed_from:
            assert to_status in TERMINAL or order.index(to_status) > order.index(src)


def test_required_status():
    assert required_status(Action.TRANSFEREE_APPROVE) is TransferStatus.pending_transferee
    assert required_status(Action.MANAGER_REJECT) is TransferStatus.pending_manager
