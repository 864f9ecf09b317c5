"""Task domain models built with SQLModel."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import TimestampMixin, enum_values

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .task_part import TaskPart


class TaskStatus(str, Enum):
    """Enumeration of possible task states."""

    TODO = "Todo"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class Department(str, Enum):
    """Departments that own a task board."""

    DESIGNERS = "Designers"
    SOCIAL = "Social"
    ACCOUNT_MANAGERS = "Account Managers"
    HR = "Hr"
    OPERATIONS = "Operations"


class TaskBase(SQLModel, table=False):
    """Shared attributes for task models."""

    title: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    status: TaskStatus = Field(
        default=TaskStatus.TODO,
        sa_column=sa.Column(
            sa.Enum(
                TaskStatus,
                name="task_status",
                native_enum=False,
                validate_strings=True,
                values_callable=enum_values,
            ),
            nullable=False,
            server_default=TaskStatus.TODO.value,
        ),
    )
    department: Department = Field(
        sa_column=sa.Column(
            sa.Enum(
                Department,
                name="task_department",
                native_enum=False,
                validate_strings=True,
                values_callable=enum_values,
            ),
            nullable=False,
        ),
    )
    created_by: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=64), nullable=True),
    )
    deadline: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    # Added by the second migration; older stores lack the column.
    assigned_to: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=64), nullable=True),
    )


class Task(TaskBase, TimestampMixin, table=True):
    """Persistent task model."""

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_department_created_at", "department", "created_at"),
    )

    id: int | None = Field(default=None, primary_key=True)
    parts: list["TaskPart"] = Relationship(
        back_populates="task",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


__all__ = ["Department", "Task", "TaskBase", "TaskStatus"]
