"""Participant play endpoints: board, submissions, hints, timers."""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from ..db import get_db
from ..engine import (
    Clock, EngineError, GateState, SubmissionOrchestrator, HintOrchestrator,
    ProgressLedger, ChallengeCatalog, EventStore, UnknownChallenge,
    challenge_states, current_challenge, elapsed_seconds, preview_points,
    format_duration, hint_cost, summarize,
)
from ..engine.gate import find_view, index_records
from .common import PARTICIPANT_ID_PATTERN, get_clock, http_error
from .schemas import (
    ChallengeBoard, ChallengeBoardItem, SubmissionCreate, SubmissionResult,
    HintRequest, HintResult, TimerInfo, ParticipantSummaryInfo,
)

router = APIRouter(prefix="/participants", tags=["participants"])


# ============ Helper Functions ============

def load_board(db: Session, participant_id: str):
    """Ordered challenges and the participant's gate views."""
    challenges = ChallengeCatalog(db).list_active()
    records = index_records(ProgressLedger(db).list_records(participant_id))
    return challenges, challenge_states(challenges, records)


def submission_message(outcome) -> str:
    if outcome.duplicate:
        return "Challenge already solved"
    if outcome.correct:
        return "Correct!"
    return "Incorrect, keep trying"


# ============ Endpoints ============

@router.get("/{participant_id}/challenges", response_model=ChallengeBoard)
async def get_board(
    participant_id: str = Path(..., pattern=PARTICIPANT_ID_PATTERN),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Every active challenge with its lock state, counters and live score."""
    try:
        _, views = load_board(db, participant_id)
        paused_at = EventStore(db).state().paused_at
    except EngineError as e:
        raise http_error(e)
    
    now = clock.now()
    current = current_challenge(views)
    
    items = []
    for view in views:
        challenge, record = view.challenge, view.record
        elapsed = elapsed_seconds(record, now, paused_at)
        hints_used = record.hints_used if record else 0
        items.append(ChallengeBoardItem(
            id=challenge.id,
            title=challenge.title,
            order_index=challenge.order_index,
            points=challenge.points,
            state=view.state,
            is_current=current is not None and current.id == challenge.id,
            prompt_md=challenge.prompt_md if view.is_unlocked else None,
            attempts=record.attempts if record else 0,
            incorrect_attempts=record.incorrect_attempts if record else 0,
            hints_used=hints_used,
            next_hint_cost=hint_cost(hints_used + 1),
            started_at=record.started_at if record else None,
            solved_at=record.solved_at if record else None,
            elapsed_seconds=elapsed,
            elapsed_display=format_duration(elapsed),
            points_preview=preview_points(challenge, record, elapsed),
        ))
    
    return ChallengeBoard(
        participant_id=participant_id,
        current_challenge_id=current.id if current else None,
        completed=bool(views) and current is None,
        challenges=items,
    )


@router.post("/{participant_id}/challenges/{challenge_id}/submit", response_model=SubmissionResult)
async def submit_answer(
    challenge_id: int,
    submission: SubmissionCreate,
    participant_id: str = Path(..., pattern=PARTICIPANT_ID_PATTERN),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """
    Submit an answer to a challenge.
    
    A wrong answer is a normal response with ``correct: false``. Error
    statuses are reserved for problems other than the answer itself.
    """
    try:
        outcome = SubmissionOrchestrator(db, clock).submit(participant_id, challenge_id, submission.answer)
    except EngineError as e:
        raise http_error(e)
    
    return SubmissionResult(
        accepted=outcome.accepted,
        correct=outcome.correct,
        awarded_points=outcome.awarded_points,
        duplicate=outcome.duplicate,
        next_challenge_id=outcome.next_challenge_id,
        breakdown=outcome.breakdown,
        message=submission_message(outcome),
    )


@router.post("/{participant_id}/challenges/{challenge_id}/hints", response_model=HintResult)
async def reveal_hint(
    challenge_id: int,
    hint_request: HintRequest = None,
    participant_id: str = Path(..., pattern=PARTICIPANT_ID_PATTERN),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Reveal the challenge hint. Each reveal adds to the hint penalty."""
    expected = hint_request.expected_hints_used if hint_request else None
    try:
        outcome = HintOrchestrator(db, clock).reveal_hint(participant_id, challenge_id, expected)
    except EngineError as e:
        raise http_error(e)
    
    return HintResult(
        hint_number=outcome.hint_number,
        point_cost=outcome.point_cost,
        hint=outcome.hint,
        duplicate=outcome.duplicate,
    )


@router.get("/{participant_id}/challenges/{challenge_id}/timer", response_model=TimerInfo)
async def get_timer(
    challenge_id: int,
    participant_id: str = Path(..., pattern=PARTICIPANT_ID_PATTERN),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    """Elapsed time on a challenge; frozen while the organisers pause timers."""
    try:
        _, views = load_board(db, participant_id)
        state = EventStore(db).state()
        view = find_view(views, challenge_id)
        if view is None:
            raise UnknownChallenge(f"Challenge {challenge_id} not found")
    except EngineError as e:
        raise http_error(e)
    
    elapsed = elapsed_seconds(view.record, clock.now(), state.paused_at)
    return TimerInfo(
        challenge_id=challenge_id,
        status=view.state,
        elapsed_seconds=elapsed,
        display=format_duration(elapsed),
        paused=state.pause_timers and view.state == GateState.UNLOCKED_IN_PROGRESS,
    )


@router.get("/{participant_id}/summary", response_model=ParticipantSummaryInfo)
async def get_summary(
    participant_id: str = Path(..., pattern=PARTICIPANT_ID_PATTERN),
    db: Session = Depends(get_db),
):
    """Totals for one participant, as they feed the leaderboard."""
    try:
        challenges = ChallengeCatalog(db).list_active()
        records = ProgressLedger(db).list_records(participant_id)
    except EngineError as e:
        raise http_error(e)
    
    return ParticipantSummaryInfo.model_validate(summarize(participant_id, challenges, records))
