"""
Scoring rules.

A solved challenge is worth its base points minus three penalties:

- incorrect answers: 1 point per 2 wrong guesses
- hints: the n-th hint costs 5n points, at most 100 in total
- time: nothing for the first 120 seconds, then 1 point per 15 seconds,
  at most 100 in total

A started challenge is always worth at least 1 point. The same function is
used for the live preview and for the finalized score, so both agree.
"""

from dataclasses import dataclass, asdict
from typing import Optional

GRACE_PERIOD_SECONDS = 120
SECONDS_PER_TIME_POINT = 15
TIME_PENALTY_CAP = 100

HINT_COST_STEP = 5
HINT_PENALTY_CAP = 100

INCORRECT_ATTEMPTS_PER_POINT = 2

MINIMUM_SCORE = 1


@dataclass(frozen=True)
class ScoreBreakdown:
    """Score components for one progress record."""
    base_points: int
    incorrect_penalty: int
    hint_penalty: int
    time_penalty: int
    awarded_points: int
    
    def to_dict(self) -> dict:
        return asdict(self)


def incorrect_penalty(incorrect_attempts: int) -> int:
    return max(0, incorrect_attempts) // INCORRECT_ATTEMPTS_PER_POINT


def hint_cost(hint_number: int) -> int:
    """Cost of the n-th hint on its own (1st = 5, 2nd = 10, ...)."""
    return HINT_COST_STEP * max(0, hint_number)


def hint_penalty(hints_used: int) -> int:
    """Cumulative cost of ``hints_used`` hints, capped."""
    h = max(0, hints_used)
    return min(HINT_PENALTY_CAP, HINT_COST_STEP * h * (h + 1) // 2)


def time_penalty(duration_seconds: int) -> int:
    over = max(0, duration_seconds - GRACE_PERIOD_SECONDS)
    return min(TIME_PENALTY_CAP, over // SECONDS_PER_TIME_POINT)


def breakdown(
    base_points: int,
    incorrect_attempts: int,
    hints_used: int,
    duration_seconds: int,
) -> ScoreBreakdown:
    inc = incorrect_penalty(incorrect_attempts)
    hints = hint_penalty(hints_used)
    elapsed = time_penalty(duration_seconds)
    return ScoreBreakdown(
        base_points=base_points,
        incorrect_penalty=inc,
        hint_penalty=hints,
        time_penalty=elapsed,
        awarded_points=max(MINIMUM_SCORE, base_points - inc - hints - elapsed),
    )


def score(
    base_points: int,
    incorrect_attempts: int,
    hints_used: int,
    duration_seconds: int,
) -> int:
    """Points awarded for a challenge given its penalties. Always >= 1."""
    return breakdown(base_points, incorrect_attempts, hints_used, duration_seconds).awarded_points


def record_points(challenge, record, duration_seconds: Optional[int] = None) -> int:
    """
    Points for ``record`` against ``challenge``.
    
    Without a record nothing has been spent yet, so the base points are
    returned. ``duration_seconds`` overrides the stored duration (live
    preview of an unsolved record); otherwise the stored duration is used.
    """
    if record is None:
        return challenge.points
    
    if duration_seconds is None:
        duration_seconds = record.duration_seconds or 0
    
    return score(
        challenge.points,
        record.incorrect_attempts or 0,
        record.hints_used or 0,
        duration_seconds,
    )
