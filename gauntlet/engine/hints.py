"""Hint orchestrator."""

import logging
from dataclasses import dataclass
from typing import Optional

from .base import BaseOrchestrator
from .errors import ChallengeSolved, PersistenceFailure
from .gate import GateState
from .scoring import hint_cost

logger = logging.getLogger(__name__)


@dataclass
class HintOutcome:
    hint_number: int
    point_cost: int  # Cost of this hint alone, not the cumulative penalty
    hint: Optional[str] = None
    duplicate: bool = False


class HintOrchestrator(BaseOrchestrator):
    
    def reveal_hint(
        self,
        participant_id: str,
        challenge_id: int,
        expected_hints_used: Optional[int] = None,
    ) -> HintOutcome:
        """
        Reveal a hint, starting the challenge timer if needed.
        
        Every call counts a hint unless ``expected_hints_used`` is given and
        does not match the stored counter. Such a call is a duplicate: nothing
        is written, and the hint text is returned only if one was already paid
        for.
        """
        self.check_admission()
        _, view = self.unlocked_view(participant_id, challenge_id)
        challenge = view.challenge
        
        if view.state == GateState.SOLVED:
            raise ChallengeSolved(f"Challenge {challenge_id} is already solved")
        
        hint_md = challenge.hint_md
        stored = view.record.hints_used if view.record is not None else 0
        if expected_hints_used is not None and expected_hints_used != stored:
            # Stale or bogus expectation: nothing is written, not even a lazy-start
            return self._duplicate(participant_id, challenge_id, hint_md, expected_hints_used, stored)
        
        try:
            record = self.ledger.upsert_record(participant_id, challenge.id, self.clock.now())
            record, applied = self.ledger.record_hint(record, expected_hints_used)
            hints_used, solved = record.hints_used, record.is_solved
            if not applied:
                self.ledger.rollback()
                if solved:
                    raise ChallengeSolved(f"Challenge {challenge_id} is already solved")
                return self._duplicate(participant_id, challenge_id, hint_md, expected_hints_used, hints_used)
            self.ledger.commit()
        except PersistenceFailure:
            self.ledger.rollback()
            raise
        
        return HintOutcome(
            hint_number=hints_used,
            point_cost=hint_cost(hints_used),
            hint=hint_md,
        )
    
    def _duplicate(self, participant_id, challenge_id, hint_md, expected: int, hints_used: int) -> HintOutcome:
        """Repeat the last paid-for hint; a participant who paid for none sees no text."""
        logger.info(
            "Duplicate hint request for %s on challenge %s (expected %s, stored %s)",
            participant_id, challenge_id, expected, hints_used,
        )
        return HintOutcome(
            hint_number=hints_used,
            point_cost=hint_cost(hints_used),
            hint=hint_md if hints_used >= 1 else None,
            duplicate=True,
        )
