# thepass/api/transfers.py

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from thepass.api.deps import get_current_profile
from thepass.core.db import get_db
from thepass.core.errors import DomainError
from thepass.models.profile import Profile
from thepass.models.task_transfer import TransferStatus
from thepass.schemas.transfer import (
    ManagerResponseRequest,
    TransferCreate,
    TransferEventRead,
    TransferRead,
    TransferResponseRequest,
)
from thepass.services.task_transfer_service import TaskTransferService

router = APIRouter(prefix="/task-transfers", tags=["transfers"])


@router.post("", response_model=TransferRead, status_code=status.HTTP_201_CREATED)
def request_transfer(
    data: TransferCreate,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    try:
        transfer = TaskTransferService(db).request_transfer(
            assignment_id=data.assignment_id,
            from_user_id=me.id,
            to_user_id=data.to_user_id,
            reason=data.reason,
        )
        db.commit()
    except DomainError:
        db.rollback()
        raise

    return transfer


@router.get("", response_model=list[TransferRead])
def list_transfers(
    status_: TransferStatus | None = Query(None, alias="status"),
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    """Managers: everything awaiting manager approval + requests addressed to them.
    Everyone else: transfers they sent or received.
    """
    return TaskTransferService(db).list_for(me, status=status_.value if status_ else None)


@router.get("/{transfer_id}", response_model=TransferRead)
def get_transfer(
    transfer_id: UUID,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    return TaskTransferService(db).get_visible(transfer_id, me)


@router.get("/{transfer_id}/events", response_model=list[TransferEventRead])
def list_transfer_events(
    transfer_id: UUID,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    svc = TaskTransferService(db)
    svc.get_visible(transfer_id, me)
    return svc.list_events(transfer_id)


@router.post("/{transfer_id}/responses", response_model=TransferRead)
def respond_to_transfer(
    transfer_id: UUID,
    payload: TransferResponseRequest,
    me: Profile = Depends(get_current_profile),
    db: Session = Depends(get_db),
):
    svc = TaskTransferService(db)
    respond = svc.respond_as_manager if isinstance(payload, ManagerResponseRequest) else svc.respond_as_transferee

    try:
        transfer = respond(
            transfer_id=transfer_id,
            actor=me,
            approve=payload.approve,
            response_text=payload.response_text,
            expected_row_version=payload.expected_row_version,
        )
        db.commit()
    except DomainError:
        db.rollback()
        raise

    return transfer
