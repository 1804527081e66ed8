"""API routes."""

from .folders import router as folders_router
from .media import router as media_router

__all__ = ["folders_router", "media_router"]
