"""SQLAlchemy models for Gauntlet."""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


class ProgressStatus:
    """Stored values of ``ChallengeProgress.status``."""
    IN_PROGRESS = "in_progress"
    SOLVED = "solved"


class Challenge(Base):
    """One puzzle in the ordered competition sequence."""
    
    __tablename__ = "challenges"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(256), nullable=False)
    prompt_md = Column(Text, nullable=False, default="")
    hint_md = Column(Text, nullable=True)
    
    # Expected answer: literal, or a case-insensitive regex when is_regex is set
    answer_pattern = Column(String(512), nullable=False)
    is_regex = Column(Boolean, default=False, nullable=False)
    
    points = Column(Integer, nullable=False, default=100)
    order_index = Column(Integer, nullable=False, unique=True)
    is_active = Column(Boolean, default=True, nullable=False)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    progress = relationship("ChallengeProgress", back_populates="challenge")
    
    def __repr__(self):
        return f"<Challenge {self.order_index}: {self.title}>"


class ChallengeProgress(Base):
    """Ledger row: one participant's progress on one challenge."""
    
    __tablename__ = "challenge_progress"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    participant_id = Column(String(64), nullable=False)
    challenge_id = Column(Integer, ForeignKey("challenges.id"), nullable=False)
    
    # Timing
    started_at = Column(DateTime, nullable=True)
    solved_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Integer, nullable=True)  # Set only when solved
    
    # Counters
    attempts = Column(Integer, nullable=False, default=0)
    incorrect_attempts = Column(Integer, nullable=False, default=0)
    hints_used = Column(Integer, nullable=False, default=0)
    
    status = Column(String(32), nullable=False, default=ProgressStatus.IN_PROGRESS)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    challenge = relationship("Challenge", back_populates="progress")
    
    __table_args__ = (
        UniqueConstraint("participant_id", "challenge_id", name="uq_progress_participant_challenge"),
        Index("ix_progress_participant", "participant_id"),
    )
    
    @property
    def is_solved(self) -> bool:
        return self.status == ProgressStatus.SOLVED
    
    def __repr__(self):
        return f"<ChallengeProgress {self.participant_id}/{self.challenge_id} {self.status}>"


class EventSetting(Base):
    """Key/value event configuration maintained by the organisers."""
    
    __tablename__ = "event_settings"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    key = Column(String(64), nullable=False, unique=True)
    value = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    def __repr__(self):
        return f"<EventSetting {self.key}={self.value}>"
