"""Submission orchestrator: judge an answer and move the participant along."""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .base import BaseOrchestrator
from .errors import InvalidInput, PersistenceFailure
from .evaluator import AnswerSpec, is_correct
from .gate import GateState, next_challenge
from .scoring import breakdown

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    """Result of one answer submission."""
    accepted: bool  # False when the challenge was already solved and nothing was recorded
    correct: bool
    awarded_points: Optional[int] = None
    duplicate: bool = False
    next_challenge_id: Optional[int] = None
    breakdown: dict = field(default_factory=dict)


class SubmissionOrchestrator(BaseOrchestrator):
    
    def submit(self, participant_id: str, challenge_id: int, answer: str) -> SubmissionOutcome:
        """
        Submit an answer.
        
        Checks, in order: admission control, the unlock gate, non-empty input.
        Then lazy-starts the record, counts the attempt, and on a correct
        answer finalizes the record and starts the next challenge's timer in
        the same transaction. Nothing is reported until the commit succeeds.
        
        Raises:
            SubmissionsDisabled, UnknownChallenge, AccessDenied, InvalidInput,
            PersistenceFailure
        """
        self.check_admission()
        challenges, view = self.unlocked_view(participant_id, challenge_id)
        
        if not answer or not answer.strip():
            raise InvalidInput("Answer must not be empty")
        
        challenge = view.challenge
        correct = is_correct(answer, AnswerSpec.for_challenge(challenge))
        
        if view.state == GateState.SOLVED:
            return self._already_solved(view.record, challenge, correct)
        
        now = self.clock.now()
        try:
            record = self.ledger.upsert_record(participant_id, challenge.id, now)
            
            if not correct:
                record, applied = self.ledger.record_incorrect(record)
                if applied:
                    outcome = SubmissionOutcome(accepted=True, correct=False)
                else:
                    outcome = self._already_solved(record, challenge, correct)
                self.ledger.commit()
                return outcome
            
            record, applied = self.ledger.record_solve(record, now)
            if not applied:
                outcome = self._already_solved(record, challenge, correct)
                self.ledger.commit()
                return outcome
            
            # Read everything the outcome needs before commit expires the instances
            result = breakdown(
                challenge.points,
                record.incorrect_attempts,
                record.hints_used,
                record.duration_seconds,
            )
            order_index = challenge.order_index
            duration = record.duration_seconds
            following = next_challenge(challenges, challenge.id)
            next_id = following.id if following is not None else None
            if following is not None:
                self.ledger.upsert_record(participant_id, next_id, now)
            
            self.ledger.commit()
        except PersistenceFailure:
            self.ledger.rollback()
            raise
        
        logger.info(
            "%s solved challenge %s in %ss for %d points",
            participant_id, order_index, duration, result.awarded_points,
        )
        
        return SubmissionOutcome(
            accepted=True,
            correct=True,
            awarded_points=result.awarded_points,
            next_challenge_id=next_id,
            breakdown=result.to_dict(),
        )
    
    def _already_solved(self, record, challenge, correct: bool) -> SubmissionOutcome:
        result = breakdown(
            challenge.points,
            record.incorrect_attempts,
            record.hints_used,
            record.duration_seconds or 0,
        )
        return SubmissionOutcome(
            accepted=False,
            correct=correct,
            awarded_points=result.awarded_points,
            duplicate=True,
            breakdown=result.to_dict(),
        )
