"""Service metadata, health and error envelope schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from ..models import Department


class RootResponse(BaseModel):
    """Service metadata and the boards it serves."""

    name: str
    environment: str
    version: str
    api_prefix: str
    departments: list[Department] = Field(
        default_factory=lambda: list(Department),
        description="Departments that have a task board",
    )


class HealthCheckResponse(BaseModel):
    """Liveness: the process is up and serving requests."""

    status: Literal["ok"] = "ok"


class TaskStoreStatus(BaseModel):
    """What the readiness check learned about the task store."""

    reachable: bool
    backend: str = Field(description="SQLAlchemy dialect name, e.g. 'sqlite' or 'postgresql'")
    assignee_filter: bool | None = Field(
        default=None,
        description="Whether 'assigned_to_actor' can be served; unknown when unreachable",
    )


class ReadinessResponse(BaseModel):
    """Readiness: whether boards can be loaded right now."""

    status: Literal["ready", "unavailable"]
    store: TaskStoreStatus


class ErrorResponse(BaseModel):
    """Envelope for every error the service returns."""

    code: str = Field(description="Stable identifier, e.g. 'fetch_error' or 'filter_unavailable'")
    message: str
    details: Any | None = Field(
        default=None,
        description="Error context; always carries the request id when one is bound",
    )
