"""Pydantic schemas for API."""

from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


# Challenge schemas
class ChallengeListItem(BaseModel):
    id: int
    title: str
    prompt_md: str
    points: int
    order_index: int
    has_hint: bool = False
    
    class Config:
        from_attributes = True


class ChallengeBoardItem(BaseModel):
    """A challenge as one participant sees it."""
    id: int
    title: str
    order_index: int
    points: int
    state: str  # locked, unlocked_not_started, unlocked_in_progress, solved
    is_current: bool = False
    prompt_md: Optional[str] = None  # Hidden while locked
    attempts: int = 0
    incorrect_attempts: int = 0
    hints_used: int = 0
    next_hint_cost: int = 5
    started_at: Optional[datetime] = None
    solved_at: Optional[datetime] = None
    elapsed_seconds: int = 0
    elapsed_display: str = "0:00"
    points_preview: int


class ChallengeBoard(BaseModel):
    participant_id: str
    current_challenge_id: Optional[int] = None
    completed: bool = False
    challenges: List[ChallengeBoardItem]


# Submission schemas
class SubmissionCreate(BaseModel):
    answer: str = Field(..., max_length=512)


class SubmissionResult(BaseModel):
    accepted: bool
    correct: bool
    awarded_points: Optional[int] = None
    duplicate: bool = False
    next_challenge_id: Optional[int] = None
    breakdown: Dict[str, Any] = {}
    message: str


# Hint schemas
class HintRequest(BaseModel):
    expected_hints_used: Optional[int] = Field(None, ge=0)


class HintResult(BaseModel):
    hint_number: int
    point_cost: int
    hint: Optional[str] = None
    duplicate: bool = False


# Timer schemas
class TimerInfo(BaseModel):
    challenge_id: int
    status: str
    elapsed_seconds: int
    display: str
    paused: bool


# Leaderboard schemas
class ParticipantSummaryInfo(BaseModel):
    participant_id: str
    rank: Optional[int] = None
    challenges_solved: int
    total_points: int
    total_time_seconds: int
    last_solve_at: Optional[datetime] = None
    current_challenge_index: Optional[int] = None
    
    class Config:
        from_attributes = True


class Leaderboard(BaseModel):
    entries: List[ParticipantSummaryInfo]
    total_participants: int


# Event schemas
class EventInfo(BaseModel):
    status: str
    allow_new_entries: bool
    allow_play_access: bool
    pause_timers: bool
    submissions_allowed: bool

