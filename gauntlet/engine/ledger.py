"""
Progress ledger.

The ledger is the only writer of ``challenge_progress`` rows and the sole
source of truth for scores and the leaderboard. It guarantees:

- at most one row per (participant, challenge): lazy-start is an
  insert-if-absent, and a writer that loses the race reads back and reuses
  the winner's ``started_at``;
- solved rows are immutable: every counter update is conditional on
  ``status = 'in_progress'``, so late or duplicate writes touch zero rows.

Database errors are wrapped in ``PersistenceFailure``. Reads are retried,
writes are not.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Tuple, TypeVar

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import LEDGER_READ_RETRIES
from ..db.models import ChallengeProgress, ProgressStatus
from .clock import seconds_between
from .errors import DuplicateRecordRace, PersistenceFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNIQUE_KEY = ["participant_id", "challenge_id"]


def retry_read(read: Callable[[], T], retries: int = LEDGER_READ_RETRIES, what: str = "read") -> T:
    """Run an idempotent read, retrying on database errors."""
    attempt = 0
    while True:
        try:
            return read()
        except SQLAlchemyError as e:
            if attempt >= retries:
                logger.error("Ledger %s failed after %d attempts: %s", what, attempt + 1, e)
                raise PersistenceFailure(f"Could not {what}", details={"error": str(e)}) from e
            attempt += 1
            logger.warning("Ledger %s failed (attempt %d), retrying: %s", what, attempt, e)


class ProgressLedger:
    """Reads and conditional writes of progress records for one session."""
    
    def __init__(self, db: Session, read_retries: int = LEDGER_READ_RETRIES):
        self.db = db
        self.read_retries = read_retries
    
    # ============ Reads ============
    
    def _query_record(self, participant_id: str, challenge_id: int) -> Optional[ChallengeProgress]:
        return self.db.query(ChallengeProgress).populate_existing().filter(
            ChallengeProgress.participant_id == participant_id,
            ChallengeProgress.challenge_id == challenge_id,
        ).first()
    
    def get_record(self, participant_id: str, challenge_id: int) -> Optional[ChallengeProgress]:
        return retry_read(
            lambda: self._query_record(participant_id, challenge_id),
            self.read_retries,
            "read progress record",
        )
    
    def list_records(self, participant_id: str) -> List[ChallengeProgress]:
        return retry_read(
            lambda: self.db.query(ChallengeProgress).populate_existing().filter(
                ChallengeProgress.participant_id == participant_id,
            ).all(),
            self.read_retries,
            "list progress records",
        )
    
    def list_all_records(self) -> List[ChallengeProgress]:
        return retry_read(
            lambda: self.db.query(ChallengeProgress).all(),
            self.read_retries,
            "list progress records",
        )
    
    def _reload(self, record: ChallengeProgress) -> ChallengeProgress:
        return self.get_record(record.participant_id, record.challenge_id)
    
    # ============ Writes ============
    
    def _insert_if_absent(self, values: dict) -> bool:
        """Insert a row unless one exists for the key. Returns True if inserted."""
        table = ChallengeProgress.__table__
        dialect = self.db.get_bind().dialect.name
        
        if dialect == "sqlite":
            stmt = sqlite_insert(table).values(**values).on_conflict_do_nothing(index_elements=_UNIQUE_KEY)
        elif dialect == "postgresql":
            stmt = pg_insert(table).values(**values).on_conflict_do_nothing(index_elements=_UNIQUE_KEY)
        else:
            try:
                with self.db.begin_nested():
                    self.db.execute(table.insert().values(**values))
                return True
            except IntegrityError:
                return False
        
        return self.db.execute(stmt).rowcount == 1
    
    def upsert_record(self, participant_id: str, challenge_id: int, started_at: datetime) -> ChallengeProgress:
        """
        Lazy-start: make sure a started record exists and return it.
        
        An existing ``started_at`` is never overwritten. If another writer
        created the row first, its record is returned.
        """
        try:
            inserted = self._insert_if_absent({
                "participant_id": participant_id,
                "challenge_id": challenge_id,
                "started_at": started_at,
                "status": ProgressStatus.IN_PROGRESS,
                "attempts": 0,
                "incorrect_attempts": 0,
                "hints_used": 0,
            })
            
            if inserted:
                logger.info("Started challenge %s for %s", challenge_id, participant_id)
            else:
                # A row was already there; only fill in a missing start time
                self.db.query(ChallengeProgress).filter(
                    ChallengeProgress.participant_id == participant_id,
                    ChallengeProgress.challenge_id == challenge_id,
                    ChallengeProgress.started_at.is_(None),
                ).update({"started_at": started_at}, synchronize_session=False)
        except SQLAlchemyError as e:
            logger.error("Could not start challenge %s for %s: %s", challenge_id, participant_id, e)
            raise PersistenceFailure("Could not start challenge", details={"error": str(e)}) from e
        
        record = self.get_record(participant_id, challenge_id)
        if record is None:
            # Should be impossible with a unique key in place
            raise PersistenceFailure("Progress record vanished after lazy-start")
        if not inserted and record.started_at != started_at:
            logger.debug(
                "%s: reusing start time %s for %s/%s",
                DuplicateRecordRace.error_code, record.started_at, participant_id, challenge_id,
            )
        return record
    
    def _update_in_progress(self, record: ChallengeProgress, values: dict, extra_filters=()) -> bool:
        try:
            count = self.db.query(ChallengeProgress).filter(
                ChallengeProgress.id == record.id,
                ChallengeProgress.status == ProgressStatus.IN_PROGRESS,
                *extra_filters,
            ).update(values, synchronize_session=False)
        except SQLAlchemyError as e:
            logger.error("Could not update progress record %s: %s", record.id, e)
            raise PersistenceFailure("Could not update progress", details={"error": str(e)}) from e
        return count == 1
    
    def record_incorrect(self, record: ChallengeProgress) -> Tuple[ChallengeProgress, bool]:
        """Count a wrong answer. Returns the fresh record and whether it changed."""
        applied = self._update_in_progress(record, {
            ChallengeProgress.attempts: ChallengeProgress.attempts + 1,
            ChallengeProgress.incorrect_attempts: ChallengeProgress.incorrect_attempts + 1,
        })
        if not applied:
            logger.warning("Ignored late incorrect attempt on finalized record %s", record.id)
        return self._reload(record), applied
    
    def record_solve(self, record: ChallengeProgress, now: datetime) -> Tuple[ChallengeProgress, bool]:
        """
        Finalize a correct answer. Only the first caller wins; duplicates
        leave the record (attempts, duration) untouched.
        """
        applied = self._update_in_progress(record, {
            ChallengeProgress.attempts: ChallengeProgress.attempts + 1,
            ChallengeProgress.status: ProgressStatus.SOLVED,
            ChallengeProgress.solved_at: now,
            ChallengeProgress.duration_seconds: seconds_between(record.started_at, now),
        })
        if not applied:
            logger.warning("Ignored duplicate solve on finalized record %s", record.id)
        return self._reload(record), applied
    
    def record_hint(
        self,
        record: ChallengeProgress,
        expected_hints_used: Optional[int] = None,
    ) -> Tuple[ChallengeProgress, bool]:
        """
        Count a revealed hint. With ``expected_hints_used`` the increment only
        happens if the stored counter still has that value.
        """
        filters = ()
        if expected_hints_used is not None:
            filters = (ChallengeProgress.hints_used == expected_hints_used,)
        applied = self._update_in_progress(
            record,
            {ChallengeProgress.hints_used: ChallengeProgress.hints_used + 1},
            filters,
        )
        return self._reload(record), applied
    
    # ============ Transactions ============
    
    def commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Could not commit progress: %s", e)
            raise PersistenceFailure("Could not save progress", details={"error": str(e)}) from e
    
    def rollback(self) -> None:
        self.db.rollback()
