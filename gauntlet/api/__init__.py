"""API routes."""

from .challenges import router as challenges_router
from .participants import router as participants_router
from .leaderboard import router as leaderboard_router

__all__ = ["challenges_router", "participants_router", "leaderboard_router"]
