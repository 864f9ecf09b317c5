"""Repository for loading tasks (with their parts) under a filter policy."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, defer, selectinload
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import FetchError, FilterUnavailableError
from ..models import Department, Task, TaskStatus
from .base import BaseRepository

logger = logging.getLogger(__name__)

ASSIGNEE_COLUMN = "assigned_to"


class FilterPolicy(str, Enum):
    """Which slice of a department's tasks a board shows."""

    EXCLUDE_COMPLETED = "exclude_completed"
    ONLY_COMPLETED = "only_completed"
    ASSIGNED_TO_ACTOR = "assigned_to_actor"


class AssigneeFallback(str, Enum):
    """Behaviour of ``ASSIGNED_TO_ACTOR`` when the store has no assignee column."""

    ERROR = "error"
    EXCLUDE_COMPLETED = "exclude_completed"


@dataclass(slots=True)
class TaskLoad:
    """Tasks returned by a load together with the policy actually applied."""

    tasks: list[Task]
    requested_policy: FilterPolicy
    applied_policy: FilterPolicy
    warnings: list[str] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return self.applied_policy is not self.requested_policy


def _has_assignee_column(sync_session: Session) -> bool:
    inspector = sa.inspect(sync_session.connection())
    columns = inspector.get_columns(Task.__tablename__)
    return any(column["name"] == ASSIGNEE_COLUMN for column in columns)


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` read operations."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        assignee_fallback: AssigneeFallback = AssigneeFallback.ERROR,
    ) -> None:
        super().__init__(session, Task)
        self._assignee_fallback = assignee_fallback
        self._assignee_supported: bool | None = None

    async def supports_assignee(self) -> bool:
        """Return ``True`` if the live ``tasks`` table carries the assignee column."""
        if self._assignee_supported is None:
            self._assignee_supported = await self.session.run_sync(_has_assignee_column)
        return self._assignee_supported

    async def load_tasks(
        self,
        department: Department,
        policy: FilterPolicy = FilterPolicy.EXCLUDE_COMPLETED,
        actor_id: str | None = None,
    ) -> TaskLoad:
        """Return the department's tasks, newest first, with parts eagerly loaded.

        Raises ``FetchError`` when the store fails and ``FilterUnavailableError``
        when ``policy`` cannot be honoured and no fallback is configured.
        """
        try:
            applied, warnings = await self._resolve_policy(policy, actor_id)
            result = await self.session.exec(self._build_query(department, applied, actor_id))
            tasks = list(result.all())
        except SQLAlchemyError as exc:
            logger.error(
                "Task query failed",
                extra={"department": department.value, "filter": policy.value},
                exc_info=exc,
            )
            raise FetchError(details={"department": department.value, "filter": policy.value}) from exc

        logger.debug(
            "Loaded %d tasks",
            len(tasks),
            extra={"department": department.value, "filter": applied.value},
        )
        return TaskLoad(
            tasks=tasks,
            requested_policy=policy,
            applied_policy=applied,
            warnings=warnings,
        )

    async def _resolve_policy(
        self,
        policy: FilterPolicy,
        actor_id: str | None,
    ) -> tuple[FilterPolicy, list[str]]:
        if policy is not FilterPolicy.ASSIGNED_TO_ACTOR:
            return policy, []
        if not actor_id:
            raise FilterUnavailableError(
                "Filter 'assigned_to_actor' requires an actor id.",
                details={"filter": policy.value},
            )
        if await self.supports_assignee():
            return policy, []

        if self._assignee_fallback is AssigneeFallback.ERROR:
            logger.warning(
                "Assignee filter requested but the task store has no assignee column",
                extra={"filter": policy.value},
            )
            raise FilterUnavailableError(
                "The task store does not track assignees; 'assigned_to_actor' is unavailable.",
                details={"filter": policy.value},
            )

        fallback = FilterPolicy.EXCLUDE_COMPLETED
        message = (
            "The task store does not track assignees; showing all open tasks "
            "instead of tasks assigned to you."
        )
        logger.warning(
            "Assignee filter degraded",
            extra={"requested_filter": policy.value, "applied_filter": fallback.value},
        )
        return fallback, [message]

    @staticmethod
    def _build_query(department: Department, policy: FilterPolicy, actor_id: str | None):
        query = (
            select(Task)
            .where(Task.department == department)
            .options(
                defer(Task.assigned_to, raiseload=True),  # type: ignore[arg-type]
                selectinload(Task.parts),  # type: ignore[arg-type]
            )
            .order_by(Task.created_at.desc(), Task.id.desc())  # type: ignore[union-attr]
            .execution_options(populate_existing=True)
        )
        if policy is FilterPolicy.ONLY_COMPLETED:
            return query.where(Task.status == TaskStatus.DONE)
        query = query.where(Task.status != TaskStatus.DONE)
        if policy is FilterPolicy.ASSIGNED_TO_ACTOR:
            query = query.where(Task.assigned_to == actor_id)
        return query


__all__ = ["AssigneeFallback", "FilterPolicy", "TaskLoad", "TaskRepository"]
