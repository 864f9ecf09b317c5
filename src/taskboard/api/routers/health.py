"""Liveness and readiness endpoints."""

from __future__ import annotations

import logging

import sqlalchemy as sa
from fastapi import APIRouter, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from ...deps import DatabaseSessionDependency
from ...repositories import TaskRepository
from ...schemas.system import HealthCheckResponse, ReadinessResponse, TaskStoreStatus

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get(
    "/healthz",
    response_model=HealthCheckResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
)
async def read_health() -> HealthCheckResponse:
    return HealthCheckResponse()


@router.get(
    "/readyz",
    response_model=ReadinessResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReadinessResponse}},
    summary="Readiness check against the task store",
)
async def read_readiness(session: DatabaseSessionDependency, response: Response) -> ReadinessResponse:
    """Ready once the task store answers; also reports whether assignee filtering is possible."""
    backend = session.get_bind().dialect.name
    try:
        await session.exec(select(sa.literal(1)))
        assignee_filter = await TaskRepository(session).supports_assignee()
    except SQLAlchemyError as exc:
        logger.error("Task store readiness check failed", extra={"backend": backend}, exc_info=exc)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(
            status="unavailable",
            store=TaskStoreStatus(reachable=False, backend=backend),
        )
    return ReadinessResponse(
        status="ready",
        store=TaskStoreStatus(reachable=True, backend=backend, assignee_filter=assignee_filter),
    )
