"""Database module."""

from .database import get_db, get_db_session, init_db, SessionLocal
from .models import Base, Challenge, ChallengeProgress, EventSetting, ProgressStatus

__all__ = [
    "get_db", "get_db_session", "init_db", "SessionLocal",
    "Base", "Challenge", "ChallengeProgress", "EventSetting", "ProgressStatus",
]
