"""Domain models exposed by the task board."""

from __future__ import annotations

from .common import TimestampMixin
from .roles import UserRole
from .task import Department, Task, TaskBase, TaskStatus
from .task_part import TaskPart, TaskPartBase

__all__ = [
    "Department",
    "Task",
    "TaskBase",
    "TaskPart",
    "TaskPartBase",
    "TaskStatus",
    "TimestampMixin",
    "UserRole",
]
