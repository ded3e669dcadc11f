"""Memorization record store.

Durable storage of one MemorizationRecord per sentence pair, with
get-or-create semantics. Every write is a single transaction over the whole
record: a failed write leaves the previous state intact.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.config import utcnow
from backend.models.attempt_log import AttemptLog
from backend.models.memorization_record import MemorizationRecord
from backend.models.sentence_pair import SentencePair
from backend.srs.errors import InvalidInputError, NotFoundError, StorageUnavailableError
from backend.srs.scheduler import DEFAULT_DIFFICULTY, MEMORIZED_DIFFICULTY, recompute_difficulty

logger = logging.getLogger(__name__)


def check_response_time(response_time_ms: int | None) -> None:
    """Reject a missing or negative response time."""
    if response_time_ms is None:
        raise InvalidInputError("response_time_ms is required")
    if response_time_ms < 0:
        raise InvalidInputError("response_time_ms must not be negative")


class MemorizationStore:
    """Keyed access to memorization records, bound to one session factory."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a database session, released on every exit path.

        Connectivity failures surface as StorageUnavailableError; anything
        not committed is rolled back when the session closes.
        """
        try:
            async with self._sessionmaker() as db:
                yield db
        except OperationalError as exc:
            logger.error("Storage unavailable: %s", exc.orig)
            raise StorageUnavailableError(str(exc.orig)) from exc

    async def get_or_create(self, pair_id: int) -> MemorizationRecord:
        """Return the pair's record, creating a zeroed one if absent."""
        async with self.session() as db:
            await self._ensure_record(db, pair_id)
            record = await self._fetch(db, pair_id)
            await db.commit()
        return record

    async def get_record(self, pair_id: int) -> MemorizationRecord | None:
        """Return the pair's record without creating one."""
        async with self.session() as db:
            if await db.get(SentencePair, pair_id) is None:
                raise NotFoundError(pair_id)
            return await self._fetch(db, pair_id)

    async def record_attempt(
        self, pair_id: int, is_correct: bool, response_time_ms: int
    ) -> MemorizationRecord:
        """Apply one scored attempt and log it, all in one transaction.

        Counters are incremented in SQL so concurrent attempts on the same
        pair are never lost. The difficulty score is recomputed from the
        incremented counters; memorized pairs keep their pinned score.
        """
        check_response_time(response_time_ms)
        async with self.session() as db:
            await self._ensure_record(db, pair_id)
            now = utcnow()
            stmt = (
                update(MemorizationRecord)
                .where(MemorizationRecord.sentence_pair_id == pair_id)
                .values(
                    attempts=MemorizationRecord.attempts + 1,
                    correct_attempts=MemorizationRecord.correct_attempts + (1 if is_correct else 0),
                    exposure_count=MemorizationRecord.exposure_count + 1,
                    last_attempt_at=now,
                )
                .returning(MemorizationRecord)
            )
            record = (await db.execute(stmt)).scalar_one()

            difficulty_before = record.difficulty_score
            if record.is_memorized:
                difficulty = MEMORIZED_DIFFICULTY
            else:
                difficulty = recompute_difficulty(
                    record.correct_attempts, record.attempts, response_time_ms
                )
            record.difficulty_score = difficulty
            db.add(
                AttemptLog(
                    sentence_pair_id=pair_id,
                    is_correct=is_correct,
                    response_time_ms=response_time_ms,
                    difficulty_before=difficulty_before,
                    difficulty_after=difficulty,
                    attempted_at=now,
                )
            )
            await db.commit()

        logger.debug(
            "Attempt on pair %d: correct=%s, %d/%d, difficulty %.3f -> %.3f",
            pair_id,
            is_correct,
            record.correct_attempts,
            record.attempts,
            difficulty_before,
            difficulty,
        )
        return record

    async def mark_memorized(self, pair_id: int) -> MemorizationRecord:
        """Flag the pair as memorized and pin its difficulty score."""
        async with self.session() as db:
            await self._ensure_record(db, pair_id)
            stmt = (
                update(MemorizationRecord)
                .where(MemorizationRecord.sentence_pair_id == pair_id)
                .values(
                    is_memorized=True,
                    memorized_at=utcnow(),
                    difficulty_score=MEMORIZED_DIFFICULTY,
                )
                .returning(MemorizationRecord)
            )
            record = (await db.execute(stmt)).scalar_one()
            await db.commit()

        logger.info("Pair %d marked as memorized", pair_id)
        return record

    async def load_candidates(self) -> list[tuple[SentencePair, MemorizationRecord | None]]:
        """Return every pair joined with its record (None if it has none yet)."""
        stmt = select(SentencePair, MemorizationRecord).outerjoin(
            MemorizationRecord, MemorizationRecord.sentence_pair_id == SentencePair.id
        )
        async with self.session() as db:
            result = await db.execute(stmt)
            return [(pair, record) for pair, record in result.all()]

    async def _fetch(self, db: AsyncSession, pair_id: int) -> MemorizationRecord | None:
        result = await db.execute(
            select(MemorizationRecord).where(MemorizationRecord.sentence_pair_id == pair_id)
        )
        return result.scalar_one_or_none()

    async def _ensure_record(self, db: AsyncSession, pair_id: int) -> None:
        """Insert a zeroed record unless one exists, without committing.

        The insert is a no-op on conflict with the unique sentence_pair_id,
        so concurrent callers converge on one row. A foreign key failure
        means the pair was deleted after the existence check.
        """
        if await db.get(SentencePair, pair_id) is None:
            raise NotFoundError(pair_id)
        try:
            result = await db.execute(_insert_zeroed_record(db.bind.dialect.name, pair_id))
        except IntegrityError as exc:
            await db.rollback()
            raise NotFoundError(pair_id) from exc
        if result.rowcount:
            logger.debug("Created memorization record for pair %d", pair_id)


def _insert_zeroed_record(dialect_name: str, pair_id: int):
    insert = postgresql_insert if dialect_name == "postgresql" else sqlite_insert
    return (
        insert(MemorizationRecord)
        .values(
            sentence_pair_id=pair_id,
            attempts=0,
            correct_attempts=0,
            exposure_count=0,
            is_memorized=False,
            difficulty_score=DEFAULT_DIFFICULTY,
        )
        .on_conflict_do_nothing(index_elements=["sentence_pair_id"])
    )
