"""Time sources for the engine."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional


class Clock(ABC):
    """Source of the current (naive UTC) time."""
    
    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(Clock):
    """Wall-clock time."""
    
    def now(self) -> datetime:
        return datetime.utcnow()


class ManualClock(Clock):
    """A clock that only moves when told to. Used for simulations and tests."""
    
    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2025, 1, 1, 12, 0, 0)
    
    def now(self) -> datetime:
        return self._now
    
    def advance(self, seconds: float) -> datetime:
        self._now += timedelta(seconds=seconds)
        return self._now
    
    def set(self, when: datetime) -> None:
        self._now = when


def seconds_between(start: datetime, end: datetime) -> int:
    """Whole seconds from start to end, never negative (tolerates clock skew)."""
    return max(0, int((end - start).total_seconds()))
