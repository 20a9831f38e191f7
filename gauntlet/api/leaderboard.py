"""Leaderboard API endpoint."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import LEADERBOARD_LIMIT
from ..db import get_db
from ..engine import ChallengeCatalog, ProgressLedger, EngineError, rank
from .common import http_error
from .schemas import Leaderboard, ParticipantSummaryInfo

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=Leaderboard)
async def get_leaderboard(
    limit: int = Query(LEADERBOARD_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Participants ranked by points, then total time, then earliest last solve."""
    try:
        challenges = ChallengeCatalog(db).list_active()
        records = ProgressLedger(db).list_all_records()
    except EngineError as e:
        raise http_error(e)
    
    ranked = rank(challenges, records)
    
    return Leaderboard(
        entries=[ParticipantSummaryInfo.model_validate(s) for s in ranked[:limit]],
        total_participants=len(ranked),
    )
