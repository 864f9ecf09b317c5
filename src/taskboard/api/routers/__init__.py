"""Router registrations for the task board application."""

from __future__ import annotations

from fastapi import APIRouter

from .boards import router as boards_router
from .health import router as health_router

api_router = APIRouter()
api_router.include_router(boards_router)

__all__ = ["api_router", "health_router"]
