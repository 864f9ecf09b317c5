"""Service layer orchestrating a department task board."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings, get_settings
from ..errors import FetchError, NotFoundError, UpdateError
from ..models import Department
from ..repositories import AssigneeFallback, FilterPolicy, TaskPartRepository, TaskRepository
from .approval import Actor, PartSignals, RevertPolicy, transition
from .progress import PartDisplayState, TaskProgress, compute_progress, display_state
from .projection import PartState, TaskProjection, TaskState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BoardSnapshot:
    """Result of a full board load."""

    department: Department
    tasks: tuple[TaskState, ...]
    requested_policy: FilterPolicy
    applied_policy: FilterPolicy
    warnings: tuple[str, ...] = ()


class TaskBoard(Protocol):
    """Capabilities a rendering adapter needs from a task board."""

    @property
    def department(self) -> Department: ...

    @property
    def tasks(self) -> tuple[TaskState, ...]: ...

    async def load_tasks(
        self,
        policy: FilterPolicy = ...,
        actor_id: str | None = ...,
    ) -> BoardSnapshot: ...

    async def act_on_part(self, actor: Actor, task_id: int, part_id: int) -> PartState | None: ...

    def progress(self, task: TaskState) -> TaskProgress: ...

    def display_state(self, part: PartSignals) -> PartDisplayState: ...


class TaskBoardService:
    """Load a department's tasks and drive the part approval workflow.

    Part changes are confirm-then-apply: the store is written first and the
    projection is patched only once the write has been acknowledged.
    """

    def __init__(
        self,
        session: AsyncSession,
        department: Department,
        *,
        settings: Settings | None = None,
        projection: TaskProjection | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._department = department
        self._timeout = settings.store_timeout_seconds
        self._revert_policy = RevertPolicy(settings.approved_revert_policy)
        self._task_repository = TaskRepository(
            session,
            assignee_fallback=AssigneeFallback(settings.assignee_filter_fallback),
        )
        self._part_repository = TaskPartRepository(session)
        self._projection = projection if projection is not None else TaskProjection()

    @property
    def department(self) -> Department:
        return self._department

    @property
    def projection(self) -> TaskProjection:
        """Expose the underlying projection for advanced scenarios."""
        return self._projection

    @property
    def tasks(self) -> tuple[TaskState, ...]:
        return self._projection.tasks

    async def load_tasks(
        self,
        policy: FilterPolicy = FilterPolicy.EXCLUDE_COMPLETED,
        actor_id: str | None = None,
    ) -> BoardSnapshot:
        """Reload the board from the store, replacing the projection."""
        try:
            load = await asyncio.wait_for(
                self._task_repository.load_tasks(self._department, policy, actor_id),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                "Timed out loading tasks",
                extra={"department": self._department.value, "timeout": self._timeout},
            )
            raise FetchError(
                "Timed out loading tasks.",
                details={"department": self._department.value, "filter": policy.value},
            ) from exc

        tasks = self._projection.replace_all(TaskState.from_model(task) for task in load.tasks)
        return BoardSnapshot(
            department=self._department,
            tasks=tasks,
            requested_policy=load.requested_policy,
            applied_policy=load.applied_policy,
            warnings=tuple(load.warnings),
        )

    async def act_on_part(self, actor: Actor, task_id: int, part_id: int) -> PartState | None:
        """Apply ``actor``'s action to a part; return the new part or ``None`` for a no-op.

        Raises ``UpdateError`` if the store rejects the change, in which case the
        projection is left exactly as it was.
        """
        part = self._projection.find_part(task_id, part_id)
        if part is None:
            logger.warning(
                "Part action ignored: part is not on the board",
                extra={"task_id": task_id, "part_id": part_id},
            )
            return None

        patch = transition(actor.role, part, revert_policy=self._revert_policy)
        if patch is None:
            logger.info(
                "Part action ignored: no change permitted for role",
                extra={"role": actor.role.value, "task_id": task_id, "part_id": part_id},
            )
            return None

        try:
            await asyncio.wait_for(
                self._part_repository.update_task_part(part_id, patch.as_values(), actor_id=actor.id),
                timeout=self._timeout,
            )
        except (SQLAlchemyError, NotFoundError, asyncio.TimeoutError) as exc:
            logger.error(
                "Task part update failed; change abandoned",
                extra={"task_id": task_id, "part_id": part_id, "role": actor.role.value},
                exc_info=exc,
            )
            raise UpdateError(details={"task_id": task_id, "part_id": part_id}) from exc

        self._projection.apply_part_patch(task_id, part_id, patch)
        return self._projection.find_part(task_id, part_id)

    def progress(self, task: TaskState) -> TaskProgress:
        return compute_progress(task)

    def display_state(self, part: PartSignals) -> PartDisplayState:
        return display_state(part)


__all__ = ["BoardSnapshot", "TaskBoard", "TaskBoardService"]
