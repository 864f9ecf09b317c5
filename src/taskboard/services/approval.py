"""Role-gated approval transitions for a single task part.

A part carries two independent signals: ``producer_checked`` (the work is
done) and ``reviewer_approved`` (a reviewer signed it off). Producers toggle
their own signal; reviewers approve, which also marks the work as done.
Everything here is pure: callers decide when and where a patch is persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Protocol, TypeVar

from ..models import UserRole

logger = logging.getLogger(__name__)


class ApprovalCapability(str, Enum):
    """What an actor may do to a task part."""

    PRODUCE = "produce"
    REVIEW = "review"
    NONE = "none"


_ROLE_CAPABILITIES: dict[UserRole, ApprovalCapability] = {
    UserRole.DESIGNER: ApprovalCapability.PRODUCE,
    UserRole.VISUAL_MANAGER: ApprovalCapability.REVIEW,
    UserRole.ADMIN: ApprovalCapability.REVIEW,
}


def capability_for(role: UserRole) -> ApprovalCapability:
    """Map a directory role onto its approval capability."""
    return _ROLE_CAPABILITIES.get(role, ApprovalCapability.NONE)


class RevertPolicy(str, Enum):
    """How a producer un-checking an already approved part is handled.

    ``KEEP_APPROVAL`` toggles ``producer_checked`` alone and may leave a part
    approved but unchecked. ``CLEAR_APPROVAL`` withdraws the approval together
    with the check. ``DENY`` refuses the revert.
    """

    KEEP_APPROVAL = "keep_approval"
    CLEAR_APPROVAL = "clear_approval"
    DENY = "deny"


class PartSignals(Protocol):
    @property
    def producer_checked(self) -> bool: ...

    @property
    def reviewer_approved(self) -> bool: ...


SignalsT = TypeVar("SignalsT", bound=PartSignals)


@dataclass(frozen=True, slots=True)
class Actor:
    """The acting user as asserted by the identity provider."""

    role: UserRole
    id: str | None = None

    @property
    def capability(self) -> ApprovalCapability:
        return capability_for(self.role)


@dataclass(frozen=True, slots=True)
class PartPatch:
    """Partial update of a part's approval signals; ``None`` means untouched."""

    producer_checked: bool | None = None
    reviewer_approved: bool | None = None

    def as_values(self) -> dict[str, bool]:
        values: dict[str, bool] = {}
        if self.producer_checked is not None:
            values["producer_checked"] = self.producer_checked
        if self.reviewer_approved is not None:
            values["reviewer_approved"] = self.reviewer_approved
        return values

    def apply_to(self, part: SignalsT) -> SignalsT:
        """Return a copy of the dataclass ``part`` with this patch merged in."""
        return replace(part, **self.as_values())  # type: ignore[type-var]


APPROVE = PartPatch(producer_checked=True, reviewer_approved=True)


def transition(
    role: UserRole,
    part: PartSignals,
    *,
    revert_policy: RevertPolicy = RevertPolicy.KEEP_APPROVAL,
) -> PartPatch | None:
    """Compute the patch ``role`` applies to ``part``, or ``None`` for no change."""

    capability = capability_for(role)
    if capability is ApprovalCapability.REVIEW:
        return APPROVE
    if capability is not ApprovalCapability.PRODUCE:
        return None

    reverting_approved = part.producer_checked and part.reviewer_approved
    if reverting_approved and revert_policy is RevertPolicy.DENY:
        logger.info("Producer revert of an approved part refused", extra={"role": role.value})
        return None
    if reverting_approved and revert_policy is RevertPolicy.CLEAR_APPROVAL:
        return PartPatch(producer_checked=False, reviewer_approved=False)
    return PartPatch(producer_checked=not part.producer_checked)


__all__ = [
    "APPROVE",
    "Actor",
    "ApprovalCapability",
    "PartPatch",
    "PartSignals",
    "RevertPolicy",
    "capability_for",
    "transition",
]
