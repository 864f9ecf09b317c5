from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from datetime import datetime
from typing import Union

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession

from taskboard.core.config import Settings
from taskboard.db import create_engine, init_db
from taskboard.models import Department, Task, TaskPart, TaskStatus
from taskboard.repositories import TaskRepository

# A part is either a title or (title, producer_checked, reviewer_approved).
PartSpec = Union[str, tuple[str, bool, bool]]
SeedTask = Callable[..., Awaitable[Task]]


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest.fixture
def settings() -> Settings:
    return Settings(environment="test")


@pytest.fixture
def seed_task(session: AsyncSession) -> SeedTask:
    repository = TaskRepository(session)

    async def _seed(
        title: str,
        *,
        department: Department = Department.DESIGNERS,
        status: TaskStatus = TaskStatus.TODO,
        parts: Sequence[PartSpec] = (),
        created_at: datetime | None = None,
        assigned_to: str | None = None,
    ) -> Task:
        task = Task(title=title, department=department, status=status, assigned_to=assigned_to)
        if created_at is not None:
            task.created_at = created_at
        await repository.add(task)
        assert task.id is not None
        for part_spec in parts:
            if isinstance(part_spec, str):
                part = TaskPart(task_id=task.id, title=part_spec)
            else:
                part_title, checked, approved = part_spec
                part = TaskPart(
                    task_id=task.id,
                    title=part_title,
                    producer_checked=checked,
                    reviewer_approved=approved,
                )
            session.add(part)
            await session.flush()
        await session.commit()
        return task

    return _seed
