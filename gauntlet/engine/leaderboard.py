"""Participant totals and ranking, derived from the progress ledger alone."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..db.models import Challenge, ChallengeProgress, ProgressStatus
from .gate import challenge_states, current_challenge, index_records
from .scoring import record_points


@dataclass
class ParticipantSummary:
    participant_id: str
    challenges_solved: int = 0
    total_points: int = 0
    total_time_seconds: int = 0
    last_solve_at: Optional[datetime] = None
    current_challenge_index: Optional[int] = None  # None once every challenge is solved
    rank: Optional[int] = None


def summarize(
    participant_id: str,
    challenges: Sequence[Challenge],
    records: Sequence[ChallengeProgress],
) -> ParticipantSummary:
    """Totals over solved records of active challenges."""
    by_challenge = index_records(records)
    summary = ParticipantSummary(participant_id=participant_id)
    
    for challenge in challenges:
        record = by_challenge.get(challenge.id)
        if record is None or record.status != ProgressStatus.SOLVED:
            continue
        summary.challenges_solved += 1
        summary.total_points += record_points(challenge, record)
        summary.total_time_seconds += record.duration_seconds or 0
        if summary.last_solve_at is None or record.solved_at > summary.last_solve_at:
            summary.last_solve_at = record.solved_at
    
    current = current_challenge(challenge_states(challenges, by_challenge))
    summary.current_challenge_index = current.order_index if current else None
    return summary


def _sort_key(summary: ParticipantSummary):
    # Never-solved participants go after everyone with a solve time
    last_solve = summary.last_solve_at or datetime.max
    return (-summary.total_points, summary.total_time_seconds, last_solve, summary.participant_id)


def rank(
    challenges: Sequence[Challenge],
    records: Sequence[ChallengeProgress],
    limit: Optional[int] = None,
) -> List[ParticipantSummary]:
    """
    Rank every participant with a ledger row.
    
    Order: most points, then least total time, then earliest last solve.
    """
    grouped: Dict[str, List[ChallengeProgress]] = {}
    for record in records:
        grouped.setdefault(record.participant_id, []).append(record)
    
    summaries = [summarize(pid, challenges, rows) for pid, rows in grouped.items()]
    summaries.sort(key=_sort_key)
    
    for i, summary in enumerate(summaries):
        summary.rank = i + 1
    
    if limit is not None:
        summaries = summaries[:limit]
    return summaries
