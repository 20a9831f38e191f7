"""Shared plumbing for the submission and hint orchestrators."""

from sqlalchemy.orm import Session

from ..config import LEDGER_READ_RETRIES
from .catalog import ChallengeCatalog
from .clock import Clock, SystemClock
from .errors import AccessDenied, SubmissionsDisabled, UnknownChallenge
from .event import EventStore
from .gate import GateState, challenge_states, find_view, index_records
from .ledger import ProgressLedger


class BaseOrchestrator:
    """Holds the collaborators of one request: ledger, catalog, event state and clock."""
    
    def __init__(
        self,
        db: Session,
        clock: Clock = None,
        read_retries: int = LEDGER_READ_RETRIES,
    ):
        self.db = db
        self.clock = clock or SystemClock()
        self.ledger = ProgressLedger(db, read_retries)
        self.catalog = ChallengeCatalog(db, read_retries)
        self.events = EventStore(db, read_retries)
    
    def check_admission(self) -> None:
        if not self.events.is_submission_allowed():
            raise SubmissionsDisabled("New submissions are currently not allowed")
    
    def load_views(self, participant_id: str):
        challenges = self.catalog.list_active()
        records = index_records(self.ledger.list_records(participant_id))
        return challenges, challenge_states(challenges, records)
    
    def unlocked_view(self, participant_id: str, challenge_id: int):
        """Gate check. Returns (ordered challenges, view of the target challenge)."""
        challenges, views = self.load_views(participant_id)
        view = find_view(views, challenge_id)
        if view is None:
            raise UnknownChallenge(f"Challenge {challenge_id} not found")
        if view.state == GateState.LOCKED:
            raise AccessDenied(
                "You must complete previous challenges first",
                details={"challenge_id": challenge_id},
            )
        return challenges, view
