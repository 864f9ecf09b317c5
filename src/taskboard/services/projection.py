"""In-memory projection of a board's tasks and parts.

States are frozen dataclasses. Applying a patch rebuilds only the touched
task and part; every other object keeps its identity so consumers can detect
changes with ``is`` comparisons.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime

from ..models import Department, Task, TaskPart, TaskStatus
from .approval import PartPatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PartState:
    id: int
    task_id: int
    title: str
    producer_checked: bool
    reviewer_approved: bool

    @classmethod
    def from_model(cls, part: TaskPart) -> "PartState":
        if part.id is None:  # pragma: no cover - persisted parts always have ids
            raise ValueError("Task part has not been persisted.")
        return cls(
            id=part.id,
            task_id=part.task_id,
            title=part.title,
            producer_checked=part.producer_checked,
            reviewer_approved=part.reviewer_approved,
        )


@dataclass(frozen=True, slots=True)
class TaskState:
    id: int
    title: str
    status: TaskStatus
    department: Department
    created_at: datetime
    parts: tuple[PartState, ...] = ()

    @classmethod
    def from_model(cls, task: Task) -> "TaskState":
        if task.id is None:  # pragma: no cover - persisted tasks always have ids
            raise ValueError("Task has not been persisted.")
        # Part ids are assigned in creation order.
        ordered = sorted(task.parts, key=lambda part: part.id or 0)
        return cls(
            id=task.id,
            title=task.title,
            status=task.status,
            department=task.department,
            created_at=task.created_at,
            parts=tuple(PartState.from_model(part) for part in ordered),
        )

    def find_part(self, part_id: int) -> PartState | None:
        for part in self.parts:
            if part.id == part_id:
                return part
        return None


class TaskProjection:
    """Holds the current board contents and merges confirmed part patches."""

    def __init__(self, tasks: Iterable[TaskState] = ()) -> None:
        self._tasks: tuple[TaskState, ...] = tuple(tasks)

    @property
    def tasks(self) -> tuple[TaskState, ...]:
        return self._tasks

    def replace_all(self, tasks: Iterable[TaskState]) -> tuple[TaskState, ...]:
        """Replace the whole projection, typically after a full load."""
        self._tasks = tuple(tasks)
        return self._tasks

    def find_task(self, task_id: int) -> TaskState | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def find_part(self, task_id: int, part_id: int) -> PartState | None:
        task = self.find_task(task_id)
        if task is None:
            return None
        return task.find_part(part_id)

    def apply_part_patch(self, task_id: int, part_id: int, patch: PartPatch) -> tuple[TaskState, ...]:
        """Merge ``patch`` into one part and return the new task tuple.

        Unknown ``task_id``/``part_id`` pairs leave the projection untouched and
        are logged.
        """
        task_index = next((i for i, task in enumerate(self._tasks) if task.id == task_id), None)
        if task_index is None:
            logger.warning(
                "Part patch ignored: task not in projection",
                extra={"task_id": task_id, "part_id": part_id},
            )
            return self._tasks

        task = self._tasks[task_index]
        part_index = next((i for i, part in enumerate(task.parts) if part.id == part_id), None)
        if part_index is None:
            logger.warning(
                "Part patch ignored: part not in task",
                extra={"task_id": task_id, "part_id": part_id},
            )
            return self._tasks

        parts = list(task.parts)
        parts[part_index] = patch.apply_to(parts[part_index])
        tasks = list(self._tasks)
        tasks[task_index] = replace(task, parts=tuple(parts))
        self._tasks = tuple(tasks)
        return self._tasks


__all__ = ["PartState", "TaskProjection", "TaskState"]
