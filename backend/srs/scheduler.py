"""Adaptive review scheduler.

Decides which sentence pair to present next and how a pair's difficulty
score evolves after each scored attempt.

Key concepts:
- Difficulty score: a value in [0, 1]; higher means the pair is surfaced more often.
- Bucket: non-memorized pairs always rank ahead of memorized ones.
- Overdue: time since the last scored attempt; never-attempted pairs are
  infinitely overdue.
"""

from __future__ import annotations

import math
import random
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from backend.config import utcnow
from backend.srs.errors import InvalidInputError

if TYPE_CHECKING:
    from backend.models.memorization_record import MemorizationRecord

# Used both for newly created records and for pairs with no record row yet
DEFAULT_DIFFICULTY = 0.5
# Pinned on memorized pairs so they rarely resurface
MEMORIZED_DIFFICULTY = 0.1

# Difficulty update weights (sum to 1)
ACCURACY_WEIGHT = 0.7
SPEED_WEIGHT = 0.3
RESPONSE_TIME_CAP_MS = 30_000


@dataclass
class Candidate:
    """A sentence pair together with the scheduling fields of its record."""

    pair: Any
    is_memorized: bool = False
    difficulty_score: float = DEFAULT_DIFFICULTY
    last_attempt_at: datetime | None = None

    @classmethod
    def from_row(cls, pair: Any, record: MemorizationRecord | None) -> Candidate:
        """Build a candidate from a pair and its (possibly absent) record."""
        if record is None:
            return cls(pair=pair)
        return cls(
            pair=pair,
            is_memorized=record.is_memorized,
            difficulty_score=record.difficulty_score,
            last_attempt_at=record.last_attempt_at,
        )

    def overdue_seconds(self, now: datetime) -> float:
        """Seconds since the last scored attempt (infinite if never attempted)."""
        if self.last_attempt_at is None:
            return math.inf
        return (now - self.last_attempt_at).total_seconds()


def rank(
    candidates: Iterable[Candidate],
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> list[Candidate]:
    """Order candidates from most to least deserving of review.

    Each rule only breaks ties left by the previous one:
    1. Non-memorized before memorized.
    2. Higher difficulty score first.
    3. Longer since the last attempt first (never attempted wins).
    4. Uniformly random.
    """
    now = now or utcnow()
    draw = rng.random if rng is not None else random.random

    def sort_key(candidate: Candidate) -> tuple[bool, float, float, float]:
        return (
            candidate.is_memorized,
            -candidate.difficulty_score,
            -candidate.overdue_seconds(now),
            draw(),
        )

    return sorted(candidates, key=sort_key)


def select_next(
    candidates: Iterable[Candidate],
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> Any | None:
    """Return the top-ranked pair, or None if there are no candidates."""
    ranked = rank(candidates, now=now, rng=rng)
    if not ranked:
        return None
    return ranked[0].pair


def recompute_difficulty(correct_attempts: int, attempts: int, response_time_ms: float) -> float:
    """Calculate the difficulty score after a scored attempt.

    difficulty = 1 - (accuracy * 0.7 + (1 - time_score) * 0.3)

    where accuracy is the lifetime fraction of correct attempts and
    time_score is the latest response time normalized to a 30s cap, so
    accurate, fast answers lower the score.
    """
    if attempts <= 0:
        raise InvalidInputError("attempts must be positive to compute difficulty")
    if not 0 <= correct_attempts <= attempts:
        raise InvalidInputError("correct_attempts must be between 0 and attempts")
    if response_time_ms < 0:
        raise InvalidInputError("response_time_ms must not be negative")

    accuracy = correct_attempts / attempts
    time_score = min(response_time_ms / RESPONSE_TIME_CAP_MS, 1.0)
    difficulty = 1 - (accuracy * ACCURACY_WEIGHT + (1 - time_score) * SPEED_WEIGHT)
    return max(0.0, min(1.0, difficulty))
