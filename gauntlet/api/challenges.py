"""Challenge and event API endpoints."""

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from ..db import get_db
from ..engine import ChallengeCatalog, EventStore, EngineError
from .common import http_error
from .schemas import ChallengeListItem, EventInfo

router = APIRouter(tags=["challenges"])


@router.get("/challenges", response_model=list[ChallengeListItem])
async def list_challenges(db: Session = Depends(get_db)):
    """List all active challenges in play order."""
    try:
        challenges = ChallengeCatalog(db).list_active()
    except EngineError as e:
        raise http_error(e)
    
    return [
        ChallengeListItem(
            id=c.id,
            title=c.title,
            prompt_md=c.prompt_md,
            points=c.points,
            order_index=c.order_index,
            has_hint=bool(c.hint_md),
        )
        for c in challenges
    ]


@router.get("/challenges/{challenge_id}", response_model=ChallengeListItem)
async def get_challenge_info(challenge_id: int, db: Session = Depends(get_db)):
    """Get a single active challenge."""
    try:
        challenge = ChallengeCatalog(db).get_active(challenge_id)
    except EngineError as e:
        raise http_error(e)
    
    if not challenge:
        raise HTTPException(status_code=404, detail=f"Challenge '{challenge_id}' not found")
    
    return ChallengeListItem(
        id=challenge.id,
        title=challenge.title,
        prompt_md=challenge.prompt_md,
        points=challenge.points,
        order_index=challenge.order_index,
        has_hint=bool(challenge.hint_md),
    )


@router.get("/event", response_model=EventInfo)
async def get_event(db: Session = Depends(get_db)):
    """Current event status as set by the organisers."""
    try:
        state = EventStore(db).state()
    except EngineError as e:
        raise http_error(e)
    
    return EventInfo(
        status=state.status,
        allow_new_entries=state.allow_new_entries,
        allow_play_access=state.allow_play_access,
        pause_timers=state.pause_timers,
        submissions_allowed=state.submissions_allowed,
    )
