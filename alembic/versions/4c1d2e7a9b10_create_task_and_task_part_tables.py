"""create task and task part tables"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "4c1d2e7a9b10"
down_revision: str | None = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None

TASK_STATUSES = ("Todo", "In Progress", "Done")
DEPARTMENTS = ("Designers", "Social", "Account Managers", "Hr", "Operations")


def upgrade() -> None:
    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                *TASK_STATUSES,
                name="task_status",
                native_enum=False,
                validate_strings=True,
            ),
            nullable=False,
            server_default="Todo",
        ),
        sa.Column(
            "department",
            sa.Enum(
                *DEPARTMENTS,
                name="task_department",
                native_enum=False,
                validate_strings=True,
            ),
            nullable=False,
        ),
        sa.Column("created_by", sa.String(length=64), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_tasks"),
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
    )
    op.create_index("ix_tasks_department_created_at", "tasks", ["department", "created_at"], unique=False)

    op.create_table(
        "task_parts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("task_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("producer_checked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reviewer_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("checked_by", sa.String(length=64), nullable=True),
        sa.Column("approved_by", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
            server_onupdate=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(["task_id"], ["tasks.id"], name="fk_task_parts_task_id_tasks", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="pk_task_parts"),
    )
    op.create_index("ix_task_parts_task_id", "task_parts", ["task_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_task_parts_task_id", table_name="task_parts")
    op.drop_table("task_parts")
    op.drop_index("ix_tasks_department_created_at", table_name="tasks")
    op.drop_table("tasks")
