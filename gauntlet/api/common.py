"""Dependencies and error mapping shared by the routers."""

from fastapi import HTTPException

from ..engine import (
    Clock, SystemClock, EngineError, SubmissionsDisabled, AccessDenied, InvalidInput,
    UnknownChallenge, ChallengeSolved, PersistenceFailure,
)

PARTICIPANT_ID_PATTERN = r'^[a-zA-Z0-9_.@-]{1,64}$'

_clock = SystemClock()

STATUS_CODES = {
    SubmissionsDisabled: 403,
    AccessDenied: 403,
    InvalidInput: 400,
    UnknownChallenge: 404,
    ChallengeSolved: 409,
    PersistenceFailure: 503,
}


def get_clock() -> Clock:
    """Dependency for the engine's time source."""
    return _clock


def http_error(exc: EngineError) -> HTTPException:
    """Translate an engine error into an HTTP error response."""
    status_code = STATUS_CODES.get(type(exc), 500)
    return HTTPException(
        status_code=status_code,
        detail={
            "error_code": exc.error_code,
            "message": exc.message,
            "retryable": exc.retryable,
            **({"details": exc.details} if exc.details else {}),
        },
    )
