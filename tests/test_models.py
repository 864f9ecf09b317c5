from __future__ import annotations

import pytest
from sqlalchemy import inspect
from sqlalchemy.orm import configure_mappers

from taskboard.models import Task, TaskPart


def test_task_and_part_relationships_resolve() -> None:
    configure_mappers()

    parts = inspect(Task).relationships["parts"]
    task = inspect(TaskPart).relationships["task"]

    assert parts.mapper.class_ is TaskPart
    assert parts.uselist is True
    assert task.mapper.class_ is Task
    assert task.uselist is False
    assert parts.back_populates == "task"


@pytest.mark.asyncio
async def test_parts_are_reachable_from_their_task(session, seed_task) -> None:
    task = await seed_task("Banners", parts=["Draft", "Export"])

    await session.refresh(task, attribute_names=["parts"])

    assert sorted(part.title for part in task.parts) == ["Draft", "Export"]
    assert all(part.task_id == task.id for part in task.parts)
