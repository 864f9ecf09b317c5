"""Database repositories for encapsulating persistence logic."""

from __future__ import annotations

from .task_parts import TaskPartRepository
from .tasks import AssigneeFallback, FilterPolicy, TaskLoad, TaskRepository

__all__ = [
    "AssigneeFallback",
    "FilterPolicy",
    "TaskLoad",
    "TaskPartRepository",
    "TaskRepository",
]
