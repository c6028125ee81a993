"""create core tables: profiles, tasks, workflows, assignments, completions

Revision ID: 3d8f2a61c0b4
Revises:
Create Date: 2026-09-28 11:04:12.518203
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3d8f2a61c0b4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ts(name: str, *, nullable: bool = False, server_default: bool = True) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=nullable,
        server_default=sa.text("now()") if server_default else None,
    )


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False, server_default="employee"),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("created_at"),
        _ts("updated_at"),
        sa.PrimaryKeyConstraint("id", name="pk_profiles"),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
    )

    op.create_table(
        "tasks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("photo_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.ForeignKeyConstraint(
            ["created_by"], ["profiles.id"], name="fk_tasks_created_by_profiles", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tasks"),
    )

    op.create_table(
        "workflows",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_repeatable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurrence_type", sa.String(length=20), nullable=False, server_default="once"),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("due_time", sa.Time(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Uuid(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint(
            "recurrence_type IN ('once', 'daily', 'weekly', 'monthly')",
            name="ck_workflows_recurrence_type_domain",
        ),
        sa.ForeignKeyConstraint(
            ["created_by"], ["profiles.id"], name="fk_workflows_created_by_profiles", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_workflows"),
    )

    op.create_table(
        "workflow_tasks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workflow_id", sa.Uuid(), nullable=False),
        sa.Column("task_id", sa.Uuid(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(
            ["workflow_id"], ["workflows.id"], name="fk_workflow_tasks_workflow_id_workflows", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["task_id"], ["tasks.id"], name="fk_workflow_tasks_task_id_tasks", ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_workflow_tasks"),
        sa.UniqueConstraint("workflow_id", "task_id", name="uq_workflow_tasks_workflow_task"),
    )
    op.create_index("ix_workflow_tasks_workflow_id", "workflow_tasks", ["workflow_id"])

    op.create_table(
        "workflow_assignments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("workflow_id", sa.Uuid(), nullable=False),
        sa.Column("assigned_to", sa.Uuid(), nullable=False),
        sa.Column("assigned_by", sa.Uuid(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        _ts("assigned_at"),
        _ts("started_at", nullable=True, server_default=False),
        _ts("completed_at", nullable=True, server_default=False),
        _ts("updated_at"),
        sa.Column("row_version", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint(
            "status IN ('pending', 'completed')",
            name="ck_workflow_assignments_status_domain",
        ),
        sa.CheckConstraint(
            "(status = 'completed') = (completed_at IS NOT NULL)",
            name="ck_workflow_assignments_completed_at_consistent",
        ),
        sa.ForeignKeyConstraint(
            ["workflow_id"], ["workflows.id"],
            name="fk_workflow_assignments_workflow_id_workflows", ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["assigned_to"], ["profiles.id"],
            name="fk_workflow_assignments_assigned_to_profiles", ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["assigned_by"], ["profiles.id"],
            name="fk_workflow_assignments_assigned_by_profiles", ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_workflow_assignments"),
        sa.UniqueConstraint(
            "workflow_id", "assigned_to", "due_date", name="uq_workflow_assignments_occurrence"
        ),
    )
    op.create_index("ix_workflow_assignments_workflow_id", "workflow_assignments", ["workflow_id"])
    op.create_index("ix_workflow_assignments_assigned_to", "workflow_assignments", ["assigned_to"])

    op.create_table(
        "task_completions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("assignment_id", sa.Uuid(), nullable=False),
        sa.Column("task_id", sa.Uuid(), nullable=False),
        sa.Column("completed_by", sa.Uuid(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        _ts("completed_at"),
        sa.Column("edited_by", sa.Uuid(), nullable=True),
        _ts("edited_at", nullable=True, server_default=False),
        sa.Column(
            "edit_history",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.ForeignKeyConstraint(
            ["assignment_id"], ["workflow_assignments.id"],
            name="fk_task_completions_assignment_id_workflow_assignments", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["task_id"], ["tasks.id"], name="fk_task_completions_task_id_tasks", ondelete="RESTRICT"
        ),
        sa.ForeignKeyConstraint(
            ["completed_by"], ["profiles.id"],
            name="fk_task_completions_completed_by_profiles", ondelete="RESTRICT",
        ),
        sa.ForeignKeyConstraint(
            ["edited_by"], ["profiles.id"], name="fk_task_completions_edited_by_profiles", ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name="pk_task_completions"),
        sa.UniqueConstraint("assignment_id", "task_id", name="uq_task_completions_assignment_task"),
    )
    op.create_index("ix_task_completions_assignment_id", "task_completions", ["assignment_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_task_completions_assignment_id", table_name="task_completions")
    op.drop_table("task_completions")
    op.drop_index("ix_workflow_assignments_assigned_to", table_name="workflow_assignments")
    op.drop_index("ix_workflow_assignments_workflow_id", table_name="workflow_assignments")
    op.drop_table("workflow_assignments")
    op.drop_index("ix_workflow_tasks_workflow_id", table_name="workflow_tasks")
    op.drop_table("workflow_tasks")
    op.drop_table("workflows")
    op.drop_table("tasks")
    op.drop_table("profiles")
