"""Challenge progression and scoring engine."""

from .errors import (
    EngineError, SubmissionsDisabled, AccessDenied, InvalidInput, UnknownChallenge,
    ChallengeSolved, InvalidAnswerSpec, PersistenceFailure, DuplicateRecordRace,
)
from .clock import Clock, SystemClock, ManualClock
from .scoring import score, breakdown, hint_cost, hint_penalty, time_penalty, incorrect_penalty
from .evaluator import AnswerSpec, is_correct, validate_answer_spec
from .gate import GateState, ChallengeView, challenge_states, current_challenge, next_challenge
from .ledger import ProgressLedger
from .catalog import ChallengeCatalog, seed_challenges
from .event import EventState, EventStore
from .timer import elapsed_seconds, preview_points, format_duration
from .submissions import SubmissionOrchestrator, SubmissionOutcome
from .hints import HintOrchestrator, HintOutcome
from .leaderboard import ParticipantSummary, summarize, rank

__all__ = [
    "EngineError", "SubmissionsDisabled", "AccessDenied", "InvalidInput", "UnknownChallenge",
    "ChallengeSolved", "InvalidAnswerSpec", "PersistenceFailure", "DuplicateRecordRace",
    "Clock", "SystemClock", "ManualClock",
    "score", "breakdown", "hint_cost", "hint_penalty", "time_penalty", "incorrect_penalty",
    "AnswerSpec", "is_correct", "validate_answer_spec",
    "GateState", "ChallengeView", "challenge_states", "current_challenge", "next_challenge",
    "ProgressLedger",
    "ChallengeCatalog", "seed_challenges",
    "EventState", "EventStore",
    "elapsed_seconds", "preview_points", "format_duration",
    "SubmissionOrchestrator", "SubmissionOutcome",
    "HintOrchestrator", "HintOutcome",
    "ParticipantSummary", "summarize", "rank",
]
