"""
Unlock gate.

Challenges are attempted strictly in order. From a participant's point of
view each active challenge is in one of four states:

    locked -> unlocked_not_started -> unlocked_in_progress -> solved

The first challenge is never locked. Any other challenge is locked until the
challenge immediately before it (by position in the active ordering) is
solved. ``solved`` is terminal.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..db.models import Challenge, ChallengeProgress, ProgressStatus


class GateState:
    LOCKED = "locked"
    UNLOCKED_NOT_STARTED = "unlocked_not_started"
    UNLOCKED_IN_PROGRESS = "unlocked_in_progress"
    SOLVED = "solved"


@dataclass
class ChallengeView:
    """A challenge with its gate state for one participant."""
    challenge: Challenge
    record: Optional[ChallengeProgress]
    state: str
    position: int  # 0-based position in the active ordering
    
    @property
    def is_unlocked(self) -> bool:
        return self.state != GateState.LOCKED


def index_records(records) -> Dict[int, ChallengeProgress]:
    return {r.challenge_id: r for r in records}


def _is_solved(record: Optional[ChallengeProgress]) -> bool:
    return record is not None and record.status == ProgressStatus.SOLVED


def _state(record: Optional[ChallengeProgress], previous_solved: bool) -> str:
    if _is_solved(record):
        return GateState.SOLVED
    if not previous_solved:
        return GateState.LOCKED
    if record is not None and record.started_at is not None:
        return GateState.UNLOCKED_IN_PROGRESS
    return GateState.UNLOCKED_NOT_STARTED


def challenge_states(
    challenges: Sequence[Challenge],
    records: Dict[int, ChallengeProgress],
) -> List[ChallengeView]:
    """Gate state of every challenge, in order."""
    views = []
    previous_solved = True  # The first challenge is the entry point
    for position, challenge in enumerate(challenges):
        record = records.get(challenge.id)
        views.append(ChallengeView(
            challenge=challenge,
            record=record,
            state=_state(record, previous_solved),
            position=position,
        ))
        previous_solved = _is_solved(record)
    return views


def find_view(views: List[ChallengeView], challenge_id: int) -> Optional[ChallengeView]:
    for view in views:
        if view.challenge.id == challenge_id:
            return view
    return None


def current_challenge(views: List[ChallengeView]) -> Optional[Challenge]:
    """First challenge not yet solved, or None when everything is solved."""
    for view in views:
        if view.state != GateState.SOLVED:
            return view.challenge
    return None


def next_challenge(challenges: Sequence[Challenge], challenge_id: int) -> Optional[Challenge]:
    """The challenge right after ``challenge_id`` in the ordering, if any."""
    for position, challenge in enumerate(challenges):
        if challenge.id == challenge_id:
            if position + 1 < len(challenges):
                return challenges[position + 1]
            return None
    return None
