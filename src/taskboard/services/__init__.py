"""Service layer: approval rules, board projection, progress metrics and chat senders."""

from __future__ import annotations

from .approval import Actor, ApprovalCapability, PartPatch, RevertPolicy, capability_for, transition
from .board import BoardSnapshot, TaskBoard, TaskBoardService
from .progress import PartDisplayState, TaskProgress, compute_progress, display_state
from .projection import PartState, TaskProjection, TaskState
from .senders import (
    ChatMessage,
    FallbackLocalIdentity,
    JoinedIdentity,
    SenderIdentity,
    SenderProfile,
    UnknownIdentity,
    avatar_color_index,
    display_name,
    initial,
    resolve_sender,
)

__all__ = [
    "Actor",
    "ApprovalCapability",
    "BoardSnapshot",
    "ChatMessage",
    "FallbackLocalIdentity",
    "JoinedIdentity",
    "PartDisplayState",
    "PartPatch",
    "PartState",
    "RevertPolicy",
    "SenderIdentity",
    "SenderProfile",
    "TaskBoard",
    "TaskBoardService",
    "TaskProgress",
    "TaskProjection",
    "TaskState",
    "UnknownIdentity",
    "avatar_color_index",
    "capability_for",
    "compute_progress",
    "display_name",
    "display_state",
    "initial",
    "resolve_sender",
    "transition",
]
