"""Pydantic schemas exposed by the API."""

from __future__ import annotations

from .board import BoardRead, PartActionRead, PartRead, TaskProgressRead, TaskRead
from .system import ErrorResponse, HealthCheckResponse, ReadinessResponse, RootResponse, TaskStoreStatus

__all__ = [
    "BoardRead",
    "ErrorResponse",
    "HealthCheckResponse",
    "PartActionRead",
    "PartRead",
    "ReadinessResponse",
    "RootResponse",
    "TaskProgressRead",
    "TaskRead",
    "TaskStoreStatus",
]
