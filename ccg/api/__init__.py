"""API routes."""

from .challenges import router as challenges_router
from .submissions import router as submissions_router
from .handles import router as handles_router

__all__ = ["challenges_router", "submissions_router", "handles_router"]
