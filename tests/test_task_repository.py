from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest
import sqlalchemy as sa
from sqlalchemy.exc import OperationalError

from taskboard.errors import FetchError, FilterUnavailableError, NotFoundError
from taskboard.models import Department, TaskStatus
from taskboard.repositories import AssigneeFallback, FilterPolicy, TaskPartRepository, TaskRepository

pytestmark = pytest.mark.asyncio

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


async def _no_assignee_column(self: TaskRepository) -> bool:
    return False


async def test_load_orders_newest_first(session, seed_task) -> None:
    await seed_task("Oldest", created_at=BASE_TIME)
    await seed_task("Newest", created_at=BASE_TIME + timedelta(days=2))
    await seed_task("Middle", created_at=BASE_TIME + timedelta(days=1))

    load = await TaskRepository(session).load_tasks(Department.DESIGNERS)

    assert [task.title for task in load.tasks] == ["Newest", "Middle", "Oldest"]
    assert load.applied_policy is FilterPolicy.EXCLUDE_COMPLETED
    assert load.warnings == []
    assert load.degraded is False


async def test_exclude_completed_is_scoped_to_department(session, seed_task) -> None:
    await seed_task("Open design", status=TaskStatus.IN_PROGRESS)
    await seed_task("Done design", status=TaskStatus.DONE)
    await seed_task("Social post", department=Department.SOCIAL)

    load = await TaskRepository(session).load_tasks(Department.DESIGNERS)

    assert [task.title for task in load.tasks] == ["Open design"]


async def test_only_completed(session, seed_task) -> None:
    await seed_task("Open design")
    await seed_task("Done design", status=TaskStatus.DONE)

    load = await TaskRepository(session).load_tasks(Department.DESIGNERS, FilterPolicy.ONLY_COMPLETED)

    assert [task.title for task in load.tasks] == ["Done design"]


async def test_parts_are_loaded_with_their_tasks(session, seed_task) -> None:
    await seed_task("Banners", parts=["Draft", ("Export", True, False), ("Upload", True, True)])

    load = await TaskRepository(session).load_tasks(Department.DESIGNERS)

    parts = sorted(load.tasks[0].parts, key=lambda part: part.id)
    assert [part.title for part in parts] == ["Draft", "Export", "Upload"]
    assert [(part.producer_checked, part.reviewer_approved) for part in parts] == [
        (False, False),
        (True, False),
        (True, True),
    ]


async def test_assigned_to_actor_filters_open_tasks(session, seed_task) -> None:
    await seed_task("Mine", assigned_to="user-1")
    await seed_task("Mine but done", assigned_to="user-1", status=TaskStatus.DONE)
    await seed_task("Someone else's", assigned_to="user-2")
    await seed_task("Unassigned")
    repository = TaskRepository(session)

    assert await repository.supports_assignee() is True
    load = await repository.load_tasks(Department.DESIGNERS, FilterPolicy.ASSIGNED_TO_ACTOR, "user-1")

    assert [task.title for task in load.tasks] == ["Mine"]
    assert load.applied_policy is FilterPolicy.ASSIGNED_TO_ACTOR


async def test_assigned_to_actor_requires_an_actor(session) -> None:
    with pytest.raises(FilterUnavailableError) as exc_info:
        await TaskRepository(session).load_tasks(Department.DESIGNERS, FilterPolicy.ASSIGNED_TO_ACTOR)

    assert exc_info.value.code == "filter_unavailable"
    assert exc_info.value.status_code == 422


async def test_missing_assignee_column_raises_by_default(session, seed_task, monkeypatch, caplog) -> None:
    await seed_task("Open design")
    monkeypatch.setattr(TaskRepository, "supports_assignee", _no_assignee_column)

    with caplog.at_level(logging.WARNING, logger="taskboard.repositories.tasks"):
        with pytest.raises(FilterUnavailableError):
            await TaskRepository(session).load_tasks(
                Department.DESIGNERS,
                FilterPolicy.ASSIGNED_TO_ACTOR,
                "user-1",
            )

    assert any("no assignee column" in record.getMessage() for record in caplog.records)


async def test_missing_assignee_column_degrades_when_configured(
    session,
    seed_task,
    monkeypatch,
    caplog,
) -> None:
    await seed_task("Open design")
    await seed_task("Done design", status=TaskStatus.DONE)
    monkeypatch.setattr(TaskRepository, "supports_assignee", _no_assignee_column)
    repository = TaskRepository(session, assignee_fallback=AssigneeFallback.EXCLUDE_COMPLETED)

    with caplog.at_level(logging.WARNING, logger="taskboard.repositories.tasks"):
        load = await repository.load_tasks(Department.DESIGNERS, FilterPolicy.ASSIGNED_TO_ACTOR, "user-1")

    assert [task.title for task in load.tasks] == ["Open design"]
    assert load.requested_policy is FilterPolicy.ASSIGNED_TO_ACTOR
    assert load.applied_policy is FilterPolicy.EXCLUDE_COMPLETED
    assert load.degraded is True
    assert len(load.warnings) == 1
    assert any(record.getMessage() == "Assignee filter degraded" for record in caplog.records)


async def test_store_failure_becomes_fetch_error(session, monkeypatch) -> None:
    async def failing_exec(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("boom"))

    monkeypatch.setattr(session, "exec", failing_exec)

    with pytest.raises(FetchError) as exc_info:
        await TaskRepository(session).load_tasks(Department.DESIGNERS)

    assert exc_info.value.status_code == 503
    assert exc_info.value.details == {"department": "Designers", "filter": "exclude_completed"}


async def _first_part_id(session) -> int:
    load = await TaskRepository(session).load_tasks(Department.DESIGNERS)
    return load.tasks[0].parts[0].id


async def test_update_task_part_writes_signals_and_attribution(session, seed_task) -> None:
    await seed_task("Banners", parts=["Export"])
    part_id = await _first_part_id(session)
    repository = TaskPartRepository(session)

    part = await repository.update_task_part(part_id, {"producer_checked": True}, actor_id="designer-1")
    assert part.producer_checked is True
    assert part.checked_by == "designer-1"
    assert part.reviewer_approved is False
    assert part.approved_by is None

    part = await repository.update_task_part(
        part_id,
        {"producer_checked": True, "reviewer_approved": True},
        actor_id="manager-1",
    )
    assert part.checked_by == "manager-1"
    assert part.approved_by == "manager-1"

    part = await repository.update_task_part(part_id, {"producer_checked": False}, actor_id="designer-1")
    assert part.producer_checked is False
    assert part.checked_by is None
    assert part.reviewer_approved is True
    assert part.approved_by == "manager-1"


async def test_update_task_part_rejects_unknown_fields(session) -> None:
    with pytest.raises(ValueError):
        await TaskPartRepository(session).update_task_part(1, {"title": True})


async def test_update_task_part_missing_part(session) -> None:
    with pytest.raises(NotFoundError):
        await TaskPartRepository(session).update_task_part(404, {"producer_checked": True})


async def test_only_completed_returns_done_tasks_newest_first(session, seed_task) -> None:
    await seed_task("Todo", status=TaskStatus.TODO, created_at=BASE_TIME)
    await seed_task("Done early", status=TaskStatus.DONE, created_at=BASE_TIME + timedelta(hours=1))
    await seed_task("Done late", status=TaskStatus.DONE, created_at=BASE_TIME + timedelta(hours=3))
    await seed_task("In progress", status=TaskStatus.IN_PROGRESS, created_at=BASE_TIME + timedelta(hours=2))

    load = await TaskRepository(session).load_tasks(Department.DESIGNERS, FilterPolicy.ONLY_COMPLETED)

    assert [task.title for task in load.tasks] == ["Done late", "Done early"]


async def test_deleting_a_task_cascades_to_its_parts(session, seed_task) -> None:
    task = await seed_task("Banners", parts=["Draft", "Export"])

    connection = await session.connection()
    await connection.execute(sa.text("DELETE FROM tasks WHERE id = :id"), {"id": task.id})
    await session.commit()

    connection = await session.connection()
    remaining = await connection.execute(
        sa.text("SELECT COUNT(*) FROM task_parts WHERE task_id = :id"),
        {"id": task.id},
    )
    assert remaining.scalar_one() == 0
