"""Displayed challenge timers and live score previews."""

from datetime import datetime
from typing import Optional

from ..db.models import Challenge, ChallengeProgress, ProgressStatus
from .clock import seconds_between
from .scoring import record_points


def elapsed_seconds(
    record: Optional[ChallengeProgress],
    now: datetime,
    paused_at: Optional[datetime] = None,
) -> int:
    """
    Seconds to show on a challenge timer.
    
    Solved records show their final duration. Running records count up from
    ``started_at`` and stand still at ``paused_at`` while timers are paused.
    This is display only; the scored duration is fixed at solve time.
    """
    if record is None or record.started_at is None:
        return 0
    if record.status == ProgressStatus.SOLVED:
        return record.duration_seconds or 0
    
    until = now
    if paused_at is not None and paused_at < now:
        until = paused_at
    return seconds_between(record.started_at, until)


def preview_points(challenge: Challenge, record: Optional[ChallengeProgress], elapsed: int) -> int:
    """Points the participant would get right now."""
    if record is not None and record.status == ProgressStatus.SOLVED:
        return record_points(challenge, record)
    return record_points(challenge, record, duration_seconds=elapsed)


def format_duration(seconds: int) -> str:
    hours, rest = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
