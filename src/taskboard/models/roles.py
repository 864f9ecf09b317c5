"""Actor roles as asserted by the identity provider."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Roles known to the dashboard's profile directory."""

    DESIGNER = "Designer"
    VISUAL_MANAGER = "Visual Manager"
    SOCIAL_MEDIA_MANAGER = "Social Media Manager"
    ACCOUNT_MANAGER = "Account Manager"
    ADMIN = "Admin"


__all__ = ["UserRole"]
