"""Event state and admission control, backed by the event_settings table."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..config import LEDGER_READ_RETRIES
from ..db.models import EventSetting
from .ledger import retry_read

logger = logging.getLogger(__name__)

EVENT_STATUSES = ("not_started", "live", "paused", "ended")

EVENT_STATUS = "event_status"
ALLOW_NEW_ENTRIES = "allow_new_entries"
ALLOW_PLAY_ACCESS = "allow_play_access"
PAUSE_TIMERS = "pause_timers"
TIMERS_PAUSED_AT = "timers_paused_at"


@dataclass
class EventState:
    status: str = "live"
    allow_new_entries: bool = True
    allow_play_access: bool = True
    pause_timers: bool = False
    timers_paused_at: Optional[datetime] = None
    
    @property
    def submissions_allowed(self) -> bool:
        return self.status == "live" and self.allow_new_entries
    
    @property
    def paused_at(self) -> Optional[datetime]:
        """Instant the displayed timers froze, or None when they are running."""
        return self.timers_paused_at if self.pause_timers else None


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value == "true"


class EventStore:
    """Reads and writes event settings."""
    
    def __init__(self, db: Session, read_retries: int = LEDGER_READ_RETRIES):
        self.db = db
        self.read_retries = read_retries
    
    def _settings(self) -> dict:
        rows = retry_read(
            lambda: self.db.query(EventSetting).all(),
            self.read_retries,
            "read event settings",
        )
        return {row.key: row.value for row in rows}
    
    def state(self) -> EventState:
        settings = self._settings()
        
        paused_at = None
        if settings.get(TIMERS_PAUSED_AT):
            paused_at = datetime.fromisoformat(settings[TIMERS_PAUSED_AT])
        
        return EventState(
            status=settings.get(EVENT_STATUS) or "live",
            allow_new_entries=_flag(settings.get(ALLOW_NEW_ENTRIES), True),
            allow_play_access=_flag(settings.get(ALLOW_PLAY_ACCESS), True),
            pause_timers=_flag(settings.get(PAUSE_TIMERS), False),
            timers_paused_at=paused_at,
        )
    
    def is_submission_allowed(self) -> bool:
        return self.state().submissions_allowed
    
    def set(self, key: str, value: str) -> None:
        if key == EVENT_STATUS and value not in EVENT_STATUSES:
            raise ValueError(f"Unknown event status '{value}'")
        
        setting = self.db.query(EventSetting).filter(EventSetting.key == key).first()
        if setting:
            setting.value = value
        else:
            self.db.add(EventSetting(key=key, value=value))
        self.db.flush()
    
    def set_timers_paused(self, paused: bool, now: datetime) -> None:
        """Pause or resume the displayed timers, remembering when they froze."""
        if paused and self.state().paused_at is not None:
            return  # Already frozen; keep the original freeze point
        self.set(PAUSE_TIMERS, "true" if paused else "false")
        self.set(TIMERS_PAUSED_AT, now.isoformat() if paused else "")
        logger.info("Timers %s at %s", "paused" if paused else "resumed", now.isoformat())
