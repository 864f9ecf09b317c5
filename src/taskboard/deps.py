"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Header
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.context import ACTOR_ID_HEADER
from .db.session import get_session
from .models import Department, UserRole
from .services import Actor, TaskBoard, TaskBoardService

ACTOR_ROLE_HEADER = "X-Actor-Role"

SettingsDependency = Annotated[Settings, Depends(get_settings)]


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


def get_actor_id(
    actor_id: Annotated[str | None, Header(alias=ACTOR_ID_HEADER)] = None,
) -> str | None:
    """Return the caller's id as asserted by the identity provider, if any."""

    return actor_id or None


def get_actor(
    role: Annotated[UserRole, Header(alias=ACTOR_ROLE_HEADER)],
    actor_id: Annotated[str | None, Depends(get_actor_id)],
) -> Actor:
    """Build the acting user from identity headers; the role is trusted as given."""

    return Actor(role=role, id=actor_id)


async def get_task_board(
    department: Department,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> TaskBoard:
    """Return a board service bound to the request's session."""

    return TaskBoardService(session, department, settings=settings)


ActorDependency = Annotated[Actor, Depends(get_actor)]
ActorIdDependency = Annotated[str | None, Depends(get_actor_id)]
TaskBoardDependency = Annotated[TaskBoard, Depends(get_task_board)]


__all__ = [
    "ACTOR_ID_HEADER",
    "ACTOR_ROLE_HEADER",
    "ActorDependency",
    "ActorIdDependency",
    "DatabaseSessionDependency",
    "SettingsDependency",
    "TaskBoardDependency",
    "get_actor",
    "get_actor_id",
    "get_db_session",
    "get_task_board",
]
