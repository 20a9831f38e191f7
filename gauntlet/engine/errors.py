"""Errors raised by the progression engine."""

from typing import Optional


class EngineError(Exception):
    """Base exception for engine errors."""
    
    error_code = "ENGINE_ERROR"
    retryable = False
    
    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class SubmissionsDisabled(EngineError):
    """The event is not live or new entries are disabled."""
    error_code = "SUBMISSIONS_DISABLED"


class AccessDenied(EngineError):
    """The challenge is locked for this participant."""
    error_code = "ACCESS_DENIED"


class InvalidInput(EngineError):
    """Empty or whitespace-only answer."""
    error_code = "INVALID_INPUT"


class UnknownChallenge(EngineError):
    """No active challenge with the requested id."""
    error_code = "UNKNOWN_CHALLENGE"


class ChallengeSolved(EngineError):
    """The progress record is finalized and accepts no more changes."""
    error_code = "CHALLENGE_SOLVED"


class InvalidAnswerSpec(EngineError):
    """A challenge's answer pattern cannot be compiled."""
    error_code = "INVALID_ANSWER_SPEC"


class PersistenceFailure(EngineError):
    """The progress ledger could not be read or written."""
    error_code = "PERSISTENCE_FAILURE"
    retryable = True


class DuplicateRecordRace(EngineError):
    """Two lazy-starts collided; resolved inside the ledger, never surfaced."""
    error_code = "DUPLICATE_RECORD_RACE"
