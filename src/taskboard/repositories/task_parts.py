"""Repository for persisting task part approval signals."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError
from ..models import TaskPart
from ..models.common import utcnow
from .base import BaseRepository

logger = logging.getLogger(__name__)

PATCHABLE_FIELDS = frozenset({"producer_checked", "reviewer_approved"})


class TaskPartRepository(BaseRepository[TaskPart]):
    """Concrete repository encapsulating ``TaskPart`` writes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TaskPart)

    async def update_task_part(
        self,
        part_id: int,
        values: Mapping[str, bool],
        *,
        actor_id: str | None = None,
    ) -> TaskPart:
        """Write the given approval signals and commit.

        Only ``producer_checked`` and ``reviewer_approved`` may be written. The
        acting user is recorded in ``checked_by``/``approved_by`` when a signal
        is set and cleared when it is unset.
        """
        unknown = set(values) - PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported task part fields: {sorted(unknown)}")

        try:
            part = await self.get(part_id)
            if part is None:
                raise NotFoundError(
                    f"Task part {part_id} does not exist.",
                    details={"part_id": part_id},
                )
            if "producer_checked" in values:
                part.producer_checked = values["producer_checked"]
                part.checked_by = actor_id if values["producer_checked"] else None
            if "reviewer_approved" in values:
                part.reviewer_approved = values["reviewer_approved"]
                part.approved_by = actor_id if values["reviewer_approved"] else None
            part.updated_at = utcnow()
            await self.session.commit()
        except SQLAlchemyError:
            logger.exception("Task part update failed", extra={"part_id": part_id})
            await self.session.rollback()
            raise
        except asyncio.CancelledError:
            # Pending attribute changes would otherwise ride along with the next commit.
            logger.warning("Task part update cancelled; rolling back", extra={"part_id": part_id})
            await asyncio.shield(self.session.rollback())
            raise

        logger.info(
            "Task part updated",
            extra={"part_id": part_id, "fields": sorted(values), "actor_id": actor_id},
        )
        return part


__all__ = ["PATCHABLE_FIELDS", "TaskPartRepository"]
