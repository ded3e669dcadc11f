"""Aggregate study statistics.

Derived read-only views over memorization records and attempt logs; nothing
here is stored separately.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy import Float, cast, distinct, func, select

from backend.config import utcnow
from backend.models.attempt_log import AttemptLog
from backend.models.memorization_record import MemorizationRecord
from backend.models.sentence_pair import SentencePair
from backend.srs.store import MemorizationStore

logger = logging.getLogger(__name__)


@dataclass
class StudyStats:
    """Overall progress across all sentence pairs."""

    total_sentences: int
    memorized_sentences: int
    total_attempts: int
    average_accuracy: float | None  # Mean per-pair accuracy over attempted pairs
    total_study_time_seconds: int
    streak_days: int
    last_study_date: datetime | None


async def compute_stats(store: MemorizationStore, now: datetime | None = None) -> StudyStats:
    """Compute overall statistics from the current records and logs."""
    now = now or utcnow()

    async with store.session() as db:
        total_sentences = (await db.execute(select(func.count(SentencePair.id)))).scalar() or 0

        memorized_stmt = select(func.count(MemorizationRecord.id)).where(
            MemorizationRecord.is_memorized.is_(True)
        )
        memorized_sentences = (await db.execute(memorized_stmt)).scalar() or 0

        accuracy_stmt = select(
            func.avg(cast(MemorizationRecord.correct_attempts, Float) / MemorizationRecord.attempts)
        ).where(MemorizationRecord.attempts > 0)
        average_accuracy = (await db.execute(accuracy_stmt)).scalar()

        last_stmt = select(func.max(MemorizationRecord.last_attempt_at))
        last_study_date = (await db.execute(last_stmt)).scalar()

        totals_stmt = select(
            func.count(AttemptLog.id), func.coalesce(func.sum(AttemptLog.response_time_ms), 0)
        )
        total_attempts, total_time_ms = (await db.execute(totals_stmt)).one()

        dates_stmt = (
            select(distinct(func.date(AttemptLog.attempted_at)))
            .order_by(func.date(AttemptLog.attempted_at).desc())
        )
        study_dates = [_as_date(row[0]) for row in (await db.execute(dates_stmt)).all()]

    return StudyStats(
        total_sentences=total_sentences,
        memorized_sentences=memorized_sentences,
        total_attempts=total_attempts or 0,
        average_accuracy=round(average_accuracy, 3) if average_accuracy is not None else None,
        total_study_time_seconds=round((total_time_ms or 0) / 1000),
        streak_days=calculate_streak(study_dates, now.date()),
        last_study_date=_as_datetime(last_study_date),
    )


def calculate_streak(study_dates: Sequence[date], today: date) -> int:
    """Count consecutive study days ending at the most recent study date.

    ``study_dates`` must be distinct and in descending order. The run only
    counts if the most recent date is today or yesterday.
    """
    if not study_dates:
        return 0
    if (today - study_dates[0]).days > 1:
        return 0

    streak = 1
    expected = study_dates[0] - timedelta(days=1)
    for study_date in study_dates[1:]:
        if study_date != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def _as_date(value: date | str) -> date:
    # SQLite's DATE() returns text
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _as_datetime(value: datetime | str | None) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
