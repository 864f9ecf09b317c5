"""Board presentation schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..models import Department, TaskStatus

DisplayStateName = Literal["unchecked", "pending_approval", "approved"]

PART_READ_EXAMPLE = {
    "id": 7,
    "task_id": 3,
    "title": "Export banner in three sizes",
    "producer_checked": True,
    "reviewer_approved": False,
    "display_state": "pending_approval",
}

TASK_READ_EXAMPLE = {
    "id": 3,
    "title": "Spring campaign banners",
    "status": TaskStatus.IN_PROGRESS.value,
    "department": Department.DESIGNERS.value,
    "created_at": "2024-03-01T09:00:00Z",
    "parts": [PART_READ_EXAMPLE],
    "progress": {"approved_count": 0, "total_count": 1, "ratio": 0.0},
}


class PartRead(BaseModel):
    """Public representation of a task part."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": PART_READ_EXAMPLE},
    )

    id: int
    task_id: int
    title: str
    producer_checked: bool
    reviewer_approved: bool
    display_state: DisplayStateName


class TaskProgressRead(BaseModel):
    """Share of a task's parts that carry reviewer approval."""

    model_config = ConfigDict(from_attributes=True)

    approved_count: int = Field(ge=0)
    total_count: int = Field(ge=0)
    ratio: float = Field(ge=0.0, le=1.0)


class TaskRead(BaseModel):
    """Public representation of a task with its parts and progress."""

    model_config = ConfigDict(json_schema_extra={"example": TASK_READ_EXAMPLE})

    id: int
    title: str
    status: TaskStatus
    department: Department
    created_at: datetime
    parts: list[PartRead]
    progress: TaskProgressRead


class BoardRead(BaseModel):
    """A department board as shown to one actor."""

    department: Department
    requested_filter: str
    applied_filter: str
    warnings: list[str] = Field(default_factory=list)
    tasks: list[TaskRead]


class PartActionRead(BaseModel):
    """Outcome of acting on a task part."""

    applied: bool = Field(description="False when the action was a no-op")
    part: PartRead | None = None
    task: TaskRead | None = None


__all__ = [
    "BoardRead",
    "PartActionRead",
    "PartRead",
    "TaskProgressRead",
    "TaskRead",
]
