"""Answer checking."""

import re
from dataclasses import dataclass
from functools import lru_cache

from .errors import InvalidAnswerSpec


@dataclass(frozen=True)
class AnswerSpec:
    """Expected answer of a challenge: a literal, or a pattern searched case-insensitively."""
    value: str
    is_pattern: bool = False
    
    @classmethod
    def for_challenge(cls, challenge) -> "AnswerSpec":
        return cls(value=challenge.answer_pattern, is_pattern=bool(challenge.is_regex))


def normalize_answer(answer: str) -> str:
    return (answer or "").strip().lower()


@lru_cache(maxsize=256)
def _compile(pattern: str) -> "re.Pattern":
    return re.compile(pattern.lower(), re.IGNORECASE)


def validate_answer_spec(spec: AnswerSpec) -> None:
    """Raise InvalidAnswerSpec if the spec can never be evaluated."""
    if not spec.value or not spec.value.strip():
        raise InvalidAnswerSpec("Answer pattern must not be empty")
    
    if spec.is_pattern:
        try:
            _compile(spec.value)
        except re.error as e:
            raise InvalidAnswerSpec(
                f"Invalid answer pattern: {e}",
                details={"pattern": spec.value},
            )


def is_correct(submitted: str, spec: AnswerSpec) -> bool:
    """
    Judge a submission.
    
    The submission is trimmed and lowercased. Patterns match anywhere in it
    (search, not full match); literals must be equal to the lowercased value.
    """
    answer = normalize_answer(submitted)
    
    if spec.is_pattern:
        return _compile(spec.value).search(answer) is not None
    
    return answer == spec.value.lower()
