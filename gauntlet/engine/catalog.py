"""Challenge catalog: ordered active challenges, answer-spec checks and seeding."""

import json
import logging
from pathlib import Path
from typing import List, Optional

from sqlalchemy import event
from sqlalchemy.orm import Session

from ..config import LEDGER_READ_RETRIES
from ..db.models import Challenge
from .evaluator import AnswerSpec, validate_answer_spec
from .ledger import retry_read

logger = logging.getLogger(__name__)


@event.listens_for(Challenge, "before_insert")
@event.listens_for(Challenge, "before_update")
def _validate_challenge(mapper, connection, target):
    """Malformed answer specs fail when the challenge is saved, not when it is played."""
    validate_answer_spec(AnswerSpec.for_challenge(target))
    if target.points is not None and target.points <= 0:
        raise ValueError(f"Challenge points must be positive, got {target.points}")


class ChallengeCatalog:
    """Read-only view of the challenge list."""
    
    def __init__(self, db: Session, read_retries: int = LEDGER_READ_RETRIES):
        self.db = db
        self.read_retries = read_retries
    
    def list_active(self) -> List[Challenge]:
        """Active challenges sorted by order_index. Inactive ones are not part of the ordering."""
        return retry_read(
            lambda: self.db.query(Challenge).filter(
                Challenge.is_active == True,  # noqa: E712
            ).order_by(Challenge.order_index.asc()).all(),
            self.read_retries,
            "list challenges",
        )
    
    def get_active(self, challenge_id: int) -> Optional[Challenge]:
        for challenge in self.list_active():
            if challenge.id == challenge_id:
                return challenge
        return None


def seed_challenges(db: Session, path: Path) -> int:
    """
    Load challenges from a JSON file.
    
    The file holds a list of objects with ``title``, ``prompt_md``,
    ``hint_md``, ``answer_pattern``, ``is_regex``, ``points``, ``order_index``
    and ``is_active``. Entries whose ``order_index`` already exists are
    skipped. Returns the number of challenges added.
    """
    path = Path(path)
    if not path.exists():
        return 0
    
    entries = json.loads(path.read_text())
    existing = {index for (index,) in db.query(Challenge.order_index).all()}
    
    added = 0
    for entry in entries:
        if entry["order_index"] in existing:
            continue
        challenge = Challenge(
            title=entry["title"],
            prompt_md=entry.get("prompt_md", ""),
            hint_md=entry.get("hint_md"),
            answer_pattern=entry["answer_pattern"],
            is_regex=entry.get("is_regex", False),
            points=entry.get("points", 100),
            order_index=entry["order_index"],
            is_active=entry.get("is_active", True),
        )
        # Fail on the offending entry rather than at flush time
        validate_answer_spec(AnswerSpec.for_challenge(challenge))
        db.add(challenge)
        existing.add(challenge.order_index)
        added += 1
    
    db.flush()
    if added:
        logger.info("Seeded %d challenges from %s", added, path)
    return added
