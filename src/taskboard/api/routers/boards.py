"""Task board endpoints: list a department's tasks and act on task parts."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query

from ...deps import ActorDependency, ActorIdDependency, TaskBoardDependency
from ...repositories import FilterPolicy
from ...schemas import BoardRead, PartActionRead, PartRead, TaskProgressRead, TaskRead
from ...services import BoardSnapshot, PartState, TaskBoard, TaskState

router = APIRouter(prefix="/boards", tags=["boards"])

FilterQuery = Annotated[
    FilterPolicy,
    Query(alias="filter", description="Which slice of the department's tasks to show"),
]


def _part_read(board: TaskBoard, part: PartState) -> PartRead:
    return PartRead(
        id=part.id,
        task_id=part.task_id,
        title=part.title,
        producer_checked=part.producer_checked,
        reviewer_approved=part.reviewer_approved,
        display_state=board.display_state(part).value,
    )


def _task_read(board: TaskBoard, task: TaskState) -> TaskRead:
    return TaskRead(
        id=task.id,
        title=task.title,
        status=task.status,
        department=task.department,
        created_at=task.created_at,
        parts=[_part_read(board, part) for part in task.parts],
        progress=TaskProgressRead.model_validate(board.progress(task)),
    )


def _board_read(board: TaskBoard, snapshot: BoardSnapshot) -> BoardRead:
    return BoardRead(
        department=snapshot.department,
        requested_filter=snapshot.requested_policy.value,
        applied_filter=snapshot.applied_policy.value,
        warnings=list(snapshot.warnings),
        tasks=[_task_read(board, task) for task in snapshot.tasks],
    )


@router.get(
    "/{department}/tasks",
    response_model=BoardRead,
    summary="List a department's tasks with part states and progress",
)
async def read_board(
    board: TaskBoardDependency,
    actor_id: ActorIdDependency,
    filter_policy: FilterQuery = FilterPolicy.EXCLUDE_COMPLETED,
) -> BoardRead:
    snapshot = await board.load_tasks(filter_policy, actor_id)
    return _board_read(board, snapshot)


@router.post(
    "/{department}/tasks/{task_id}/parts/{part_id}/check",
    response_model=PartActionRead,
    summary="Check or approve a task part according to the actor's role",
)
async def check_part(
    task_id: int,
    part_id: int,
    board: TaskBoardDependency,
    actor: ActorDependency,
    filter_policy: FilterQuery = FilterPolicy.EXCLUDE_COMPLETED,
) -> PartActionRead:
    """Producers toggle their check; reviewers approve. Other roles change nothing."""
    await board.load_tasks(filter_policy, actor.id)
    part = await board.act_on_part(actor, task_id, part_id)
    if part is None:
        return PartActionRead(applied=False)
    task = next(task for task in board.tasks if task.id == task_id)
    return PartActionRead(
        applied=True,
        part=_part_read(board, part),
        task=_task_read(board, task),
    )
