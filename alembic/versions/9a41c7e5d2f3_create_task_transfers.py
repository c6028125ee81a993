"""create task_transfers + task_transfer_events (two-stage approval, audit log)

Revision ID: 9a41c7e5d2f3
Revises: 3d8f2a61c0b4
Create Date: 2026-09-30 16:42:57.902114
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "9a41c7e5d2f3"
down_revision: Union[str, Sequence[str], None] = "3d8f2a61c0b4"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "task_transfers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("assignment_id", sa.Uuid(), nullable=False),
        sa.Column("from_user_id", sa.Uuid(), nullable=False),
        sa.Column("to_user_id", sa.Uuid(), nullable=False),
        sa.Column("requested_by", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="pending_transferee"),
        sa.Column("transfer_reason", sa.Text(), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("transferee_response", sa.Text(), nullable=True),
        sa.Column("transferee_responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("manager_id", sa.Uuid(), nullable=True),
        sa.Column("manager_response", sa.Text(), nullable=True),
        sa.Column("manager_responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default="1"),
        sa.ForeignKeyConstraint(
            ["assignment_id"], ["workflow_assignments.id"],
            name="fk_task_transfers_assignment_id_workflow_assignments", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["from_user_id"], ["profiles.id"], name="fk_task_transfers_from_user_id_profiles", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["to_user_id"], ["profiles.id"], name="fk_task_transfers_to_user_id_profiles", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["requested_by"], ["profiles.id"], name="fk_task_transfers_requested_by_profiles", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["manager_id"], ["profiles.id"], name="fk_task_transfers_manager_id_profiles", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_task_transfers"),
    )
    op.create_index("ix_task_transfers_assignment_id", "task_transfers", ["assignment_id"])
    op.create_index("ix_task_transfers_to_user_id", "task_transfers", ["to_user_id"])
    op.create_index("ix_task_transfers_status", "task_transfers", ["status"])

    # --- DB hardening: invariants enforced by the store, not only by handlers ---
    op.create_check_constraint(
        "ck_task_transfers_distinct_users",
        "task_transfers",
        "from_user_id <> to_user_id",
    )
    op.create_check_constraint(
        "ck_task_transfers_status_domain",
        "task_transfers",
        "status IN ('pending_transferee', 'pending_manager', 'approved', 'rejected')",
    )
    # at most one active transfer per assignment
    op.create_index(
        "uq_task_transfers_active_assignment",
        "task_transfers",
        ["assignment_id"],
        unique=True,
        postgresql_where=sa.text("status IN ('pending_transferee', 'pending_manager')"),
    )

    op.create_table(
        "task_transfer_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("transfer_id", sa.Uuid(), nullable=False),
        sa.Column("actor_user_id", sa.Uuid(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("from_status", sa.String(length=30), nullable=True),
        sa.Column("to_status", sa.String(length=30), nullable=False),
        sa.Column(
            "payload",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("result_row_version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(
            ["transfer_id"], ["task_transfers.id"],
            name="fk_task_transfer_events_transfer_id_task_transfers", ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_task_transfer_events"),
        sa.UniqueConstraint("transfer_id", "result_row_version", name="uq_task_transfer_events_version"),
    )
    op.create_index("ix_task_transfer_events_transfer_id", "task_transfer_events", ["transfer_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_task_transfer_events_transfer_id", table_name="task_transfer_events")
    op.drop_table("task_transfer_events")
    op.drop_index("uq_task_transfers_active_assignment", table_name="task_transfers")
    op.drop_constraint("ck_task_transfers_status_domain", "task_transfers", type_="check")
    op.drop_constraint("ck_task_transfers_distinct_users", "task_transfers", type_="check")
    op.drop_index("ix_task_transfers_status", table_name="task_transfers")
    op.drop_index("ix_task_transfers_to_user_id", table_name="task_transfers")
    op.drop_index("ix_task_transfers_assignment_id", table_name="task_transfers")
    op.drop_table("task_transfers")
