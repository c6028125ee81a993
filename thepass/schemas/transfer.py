# thepass/schemas/transfer.py
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import Field, conint

from thepass.models.task_transfer import TransferStatus
from thepass.schemas.base import ORMModel, StrictBaseModel


class TransferCreate(StrictBaseModel):
    assignment_id: UUID = Field(
        ...,
        description="Assignment being handed over (must be yours and not completed)",
        examples=["44444444-4444-4444-4444-444444444444"],
    )
    to_user_id: UUID = Field(
        ...,
        description="Profile ID of the recipient",
        examples=["33333333-3333-3333-3333-333333333333"],
    )
    reason: Optional[str] = Field(
        None,
        max_length=1000,
        description="Why the task is being transferred",
        examples=["going on break"],
    )


# ============================================================================
# RESPONSE REQUESTS (discriminator = stage)
# ============================================================================


class ResponseCommon(StrictBaseModel):
    approve: bool = Field(..., description="true = approve, false = reject")
    response_text: Optional[str] = Field(None, max_length=1000)
    expected_row_version: Optional[conint(ge=1)] = Field(
        None,
        description="Optimistic lock: expected transfer row_version (optional)",
        examples=[1],
    )


class TransfereeResponseRequest(ResponseCommon):
    """Stage 1: recipient accepts/declines (pending_transferee -> pending_manager | rejected)."""

    stage: Literal["transferee"] = "transferee"


class ManagerResponseRequest(ResponseCommon):
    """Stage 2: manager approves/rejects (pending_manager -> approved | rejected)."""

    stage: Literal["manager"] = "manager"


TransferResponseRequest = Annotated[
    Union[TransfereeResponseRequest, ManagerResponseRequest],
    Field(discriminator="stage"),
]


class TransferRead(ORMModel):
    id: UUID
    assignment_id: UUID
    from_user_id: UUID
    to_user_id: UUID
    requested_by: UUID
    status: TransferStatus
    transfer_reason: str | None = None
    requested_at: datetime
    transferee_response: str | None = None
    transferee_responded_at: datetime | None = None
    manager_id: UUID | None = None
    manager_response: str | None = None
    manager_responded_at: datetime | None = None
    row_version: int


class TransferEventRead(ORMModel):
    """Audit trail item (GET /task-transfers/{id}/events)."""

    id: UUID
    transfer_id: UUID
    actor_user_id: UUID
    action: str
    from_status: str | None = None
    to_status: str
    payload: dict | None = None
    result_row_version: int
    created_at: datetime
