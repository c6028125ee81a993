# thepass/models/task_transfer_event.py

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from thepass.models.base import Base, JSONType


class TaskTransferEvent(Base):
    """Append-only audit log of transfer state changes."""

    __tablename__ = "task_transfer_events"
    __table_args__ = (
        # one event per resulting version: no lost or duplicated transitions
        UniqueConstraint("transfer_id", "result_row_version", name="uq_task_transfer_events_version"),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    transfer_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("task_transfers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    actor_user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)

    action: Mapped[str] = mapped_column(String(50), nullable=False)

    # NULL for the initial request
    from_status: Mapped[str | None] = mapped_column(String(30), nullable=True)
    to_status: Mapped[str] = mapped_column(String(30), nullable=False)

    payload: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    result_row_version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
