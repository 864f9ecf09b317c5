"""Completion metrics derived from part approval signals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .approval import PartSignals
from .projection import TaskState


class PartDisplayState(str, Enum):
    UNCHECKED = "unchecked"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"


@dataclass(frozen=True, slots=True)
class TaskProgress:
    approved_count: int
    total_count: int
    ratio: float


def compute_progress(task: TaskState) -> TaskProgress:
    """Return how many of ``task``'s parts carry reviewer approval."""
    total = len(task.parts)
    approved = sum(1 for part in task.parts if part.reviewer_approved)
    ratio = approved / total if total else 0.0
    return TaskProgress(approved_count=approved, total_count=total, ratio=ratio)


def display_state(part: PartSignals) -> PartDisplayState:
    # Approval wins, so an approved but unchecked part still shows as approved.
    if part.reviewer_approved:
        return PartDisplayState.APPROVED
    if part.producer_checked:
        return PartDisplayState.PENDING_APPROVAL
    return PartDisplayState.UNCHECKED


__all__ = ["PartDisplayState", "TaskProgress", "compute_progress", "display_state"]
