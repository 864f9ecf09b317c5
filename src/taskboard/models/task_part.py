"""Task part (checklist item) models built with SQLModel."""

from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .task import Task


class TaskPartBase(SQLModel, table=False):
    """Shared attributes for task part models."""

    title: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    producer_checked: bool = Field(
        default=False,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    reviewer_approved: bool = Field(
        default=False,
        sa_column=sa.Column(sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    checked_by: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=64), nullable=True),
    )
    approved_by: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.String(length=64), nullable=True),
    )
    task_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )


class TaskPart(TaskPartBase, TimestampMixin, table=True):
    """Persistent task part model."""

    __tablename__ = "task_parts"
    __table_args__ = (sa.Index("ix_task_parts_task_id", "task_id"),)

    id: int | None = Field(default=None, primary_key=True)
    task: "Task" = Relationship(back_populates="parts")


__all__ = ["TaskPart", "TaskPartBase"]
