"""Tests for the memorization record store and sentence pair CRUD."""

import asyncio
import json
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from backend.database import create_sessionmaker
from backend.models.attempt_log import AttemptLog
from backend.models.memorization_record import MemorizationRecord
from backend.srs.errors import InvalidInputError, NotFoundError, StorageUnavailableError
from backend.srs.pairs import (
    create_pair,
    delete_pair,
    get_pair,
    import_pairs,
    list_pairs,
    read_pair_entries,
    update_pair,
)
from backend.srs.scheduler import DEFAULT_DIFFICULTY, MEMORIZED_DIFFICULTY
from backend.srs.store import MemorizationStore


async def _count(store: MemorizationStore, model: type) -> int:
    async with store.session() as db:
        return (await db.execute(select(func.count(model.id)))).scalar() or 0


# --- get_or_create ---


class TestGetOrCreate:
    @pytest.mark.asyncio
    async def test_creates_zeroed_record(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Thank you.", "감사합니다.")
        record = await store.get_or_create(pair.id)
        assert record.sentence_pair_id == pair.id
        assert record.attempts == 0
        assert record.correct_attempts == 0
        assert record.exposure_count == 0
        assert record.is_memorized is False
        assert record.last_attempt_at is None
        assert record.difficulty_score == DEFAULT_DIFFICULTY

    @pytest.mark.asyncio
    async def test_returns_existing_record(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Thank you.", "감사합니다.")
        first = await store.get_or_create(pair.id)
        second = await store.get_or_create(pair.id)
        assert first.id == second.id
        assert await _count(store, MemorizationRecord) == 1

    @pytest.mark.asyncio
    async def test_unknown_pair_not_found(self, store: MemorizationStore) -> None:
        with pytest.raises(NotFoundError):
            await store.get_or_create(999)

    @pytest.mark.asyncio
    async def test_concurrent_creation_yields_one_record(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Good night.", "잘 자요.")
        records = await asyncio.gather(*(store.get_or_create(pair.id) for _ in range(5)))
        assert len({record.id for record in records}) == 1
        assert await _count(store, MemorizationRecord) == 1


# --- record_attempt ---


class TestRecordAttempt:
    @pytest.mark.asyncio
    async def test_correct_attempt(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")
        record = await store.record_attempt(pair.id, True, 0)
        assert record.attempts == 1
        assert record.correct_attempts == 1
        assert record.exposure_count == 1
        assert record.last_attempt_at is not None
        assert record.difficulty_score == pytest.approx(0.0)

    @pytest.mark.asyncio
    async def test_incorrect_slow_attempt(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")
        record = await store.record_attempt(pair.id, False, 30000)
        assert record.attempts == 1
        assert record.correct_attempts == 0
        assert record.difficulty_score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_invariants_hold_over_sequence(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Where is the station?", "역이 어디예요?")
        outcomes = [(True, 4000), (False, 25000), (False, 60000), (True, 1000), (True, 0)]
        for is_correct, time_ms in outcomes:
            record = await store.record_attempt(pair.id, is_correct, time_ms)
            assert 0 <= record.correct_attempts <= record.attempts
            assert 0.0 <= record.difficulty_score <= 1.0
        assert record.attempts == 5
        assert record.correct_attempts == 3
        assert await _count(store, AttemptLog) == 5

    @pytest.mark.asyncio
    async def test_persists(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")
        await store.record_attempt(pair.id, True, 5000)
        record = await store.get_record(pair.id)
        assert record is not None
        assert record.attempts == 1

    @pytest.mark.asyncio
    async def test_negative_response_time_rejected(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")
        with pytest.raises(InvalidInputError):
            await store.record_attempt(pair.id, True, -5)
        assert await store.get_record(pair.id) is None

    @pytest.mark.asyncio
    async def test_missing_response_time_rejected(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")
        with pytest.raises(InvalidInputError):
            await store.record_attempt(pair.id, True, None)  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_unknown_pair_not_found(self, store: MemorizationStore) -> None:
        with pytest.raises(NotFoundError):
            await store.record_attempt(42, True, 1000)

    @pytest.mark.asyncio
    async def test_memorized_pair_keeps_pinned_difficulty(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")
        await store.mark_memorized(pair.id)
        record = await store.record_attempt(pair.id, False, 30000)
        assert record.attempts == 1
        assert record.is_memorized is True
        assert record.difficulty_score == MEMORIZED_DIFFICULTY

    @pytest.mark.asyncio
    async def test_concurrent_attempts_all_counted(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "See you tomorrow.", "내일 봐요.")
        await asyncio.gather(
            *(store.record_attempt(pair.id, i % 2 == 0, 1000 * i) for i in range(6))
        )
        record = await store.get_record(pair.id)
        assert record is not None
        assert record.attempts == 6
        assert record.correct_attempts == 3
        assert record.exposure_count == 6
        assert await _count(store, MemorizationRecord) == 1
        assert await _count(store, AttemptLog) == 6

    @pytest.mark.asyncio
    async def test_failed_first_attempt_leaves_no_record(
        self, store: MemorizationStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")

        def fail(*args: object) -> float:
            raise RuntimeError("scoring failed")

        monkeypatch.setattr("backend.srs.store.recompute_difficulty", fail)
        with pytest.raises(RuntimeError):
            await store.record_attempt(pair.id, True, 1000)

        assert await store.get_record(pair.id) is None
        assert await _count(store, AttemptLog) == 0

    @pytest.mark.asyncio
    async def test_failed_attempt_keeps_previous_counters(
        self, store: MemorizationStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")
        before = await store.record_attempt(pair.id, True, 2000)

        def fail(*args: object) -> float:
            raise RuntimeError("scoring failed")

        monkeypatch.setattr("backend.srs.store.recompute_difficulty", fail)
        with pytest.raises(RuntimeError):
            await store.record_attempt(pair.id, False, 9000)

        record = await store.get_record(pair.id)
        assert record is not None
        assert record.attempts == 1
        assert record.correct_attempts == 1
        assert record.difficulty_score == pytest.approx(before.difficulty_score)
        assert await _count(store, AttemptLog) == 1


# --- mark_memorized ---


class TestMarkMemorized:
    @pytest.mark.asyncio
    async def test_sets_flag_and_low_difficulty(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "See you tomorrow.", "내일 봐요.")
        await store.record_attempt(pair.id, False, 30000)
        record = await store.mark_memorized(pair.id)
        assert record.is_memorized is True
        assert record.memorized_at is not None
        assert record.difficulty_score == 0.1

    @pytest.mark.asyncio
    async def test_does_not_touch_counters(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "See you tomorrow.", "내일 봐요.")
        await store.record_attempt(pair.id, True, 3000)
        await store.record_attempt(pair.id, False, 3000)
        record = await store.mark_memorized(pair.id)
        assert record.attempts == 2
        assert record.correct_attempts == 1

    @pytest.mark.asyncio
    async def test_creates_record_if_absent(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "See you tomorrow.", "내일 봐요.")
        record = await store.mark_memorized(pair.id)
        assert record.is_memorized is True
        assert record.attempts == 0

    @pytest.mark.asyncio
    async def test_unknown_pair_not_found(self, store: MemorizationStore) -> None:
        with pytest.raises(NotFoundError):
            await store.mark_memorized(7)


# --- Candidates ---


class TestLoadCandidates:
    @pytest.mark.asyncio
    async def test_left_joins_records(self, store: MemorizationStore) -> None:
        seen = await create_pair(store, "Yes.", "네.")
        unseen = await create_pair(store, "No.", "아니요.")
        await store.record_attempt(seen.id, True, 1000)

        rows = {pair.id: record for pair, record in await store.load_candidates()}
        assert set(rows) == {seen.id, unseen.id}
        assert rows[seen.id] is not None
        assert rows[unseen.id] is None


# --- Sentence pairs ---


class TestSentencePairs:
    @pytest.mark.asyncio
    async def test_create_strips_text(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "  I'm hungry. ", " 배고파요. ")
        assert pair.id >= 1
        assert pair.english == "I'm hungry."
        assert pair.korean == "배고파요."
        assert pair.created_at is not None

    @pytest.mark.asyncio
    async def test_create_requires_both_texts(self, store: MemorizationStore) -> None:
        with pytest.raises(InvalidInputError):
            await create_pair(store, "Hello.", "   ")

    @pytest.mark.asyncio
    async def test_list_newest_first(self, store: MemorizationStore) -> None:
        first = await create_pair(store, "One.", "하나.")
        second = await create_pair(store, "Two.", "둘.")
        assert [pair.id for pair in await list_pairs(store)] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_update_keeps_record(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Hello.", "안녕.")
        await store.record_attempt(pair.id, True, 2000)
        updated = await update_pair(store, pair.id, "Hi.", "안녕.")
        assert updated.english == "Hi."
        record = await store.get_record(pair.id)
        assert record is not None
        assert record.attempts == 1

    @pytest.mark.asyncio
    async def test_update_unknown_not_found(self, store: MemorizationStore) -> None:
        with pytest.raises(NotFoundError):
            await update_pair(store, 123, "Hi.", "안녕.")

    @pytest.mark.asyncio
    async def test_delete_cascades(self, store: MemorizationStore) -> None:
        pair = await create_pair(store, "Hello.", "안녕하세요.")
        await store.record_attempt(pair.id, True, 2000)
        await store.record_attempt(pair.id, False, 9000)

        await delete_pair(store, pair.id)

        assert await _count(store, MemorizationRecord) == 0
        assert await _count(store, AttemptLog) == 0
        with pytest.raises(NotFoundError):
            await get_pair(store, pair.id)
        with pytest.raises(NotFoundError):
            await store.get_or_create(pair.id)

    @pytest.mark.asyncio
    async def test_delete_unknown_not_found(self, store: MemorizationStore) -> None:
        with pytest.raises(NotFoundError):
            await delete_pair(store, 55)


# --- Import ---


class TestImportPairs:
    def test_read_json(self, tmp_path: Path) -> None:
        path = tmp_path / "pairs.json"
        path.write_text(
            json.dumps([{"english": "Hello.", "korean": "안녕하세요."}], ensure_ascii=False),
            encoding="utf-8",
        )
        assert read_pair_entries(path) == [{"english": "Hello.", "korean": "안녕하세요."}]

    def test_read_csv(self, tmp_path: Path) -> None:
        path = tmp_path / "pairs.csv"
        path.write_text("english,korean\nThank you.,감사합니다.\n", encoding="utf-8")
        assert read_pair_entries(path) == [{"english": "Thank you.", "korean": "감사합니다."}]

    def test_read_rejects_non_list_json(self, tmp_path: Path) -> None:
        path = tmp_path / "pairs.json"
        path.write_text('{"english": "Hello."}', encoding="utf-8")
        with pytest.raises(InvalidInputError):
            read_pair_entries(path)

    @pytest.mark.asyncio
    async def test_skips_duplicates_and_incomplete(self, store: MemorizationStore) -> None:
        entries = [
            {"english": "Hello.", "korean": "안녕하세요."},
            {"english": "Hello.", "korean": "안녕."},
            {"english": "Yes.", "korean": ""},
            {"english": "No.", "korean": "아니요."},
        ]
        assert await import_pairs(store, entries) == 2
        assert await import_pairs(store, entries) == 0
        assert sorted(pair.english for pair in await list_pairs(store)) == ["Hello.", "No."]


# --- Storage failures ---


@pytest.mark.asyncio
async def test_unreachable_database_raises_storage_unavailable(tmp_path: Path) -> None:
    # Parent directory does not exist, so SQLite cannot open the file
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'memorizer.db'}")
    store = MemorizationStore(create_sessionmaker(engine))
    try:
        with pytest.raises(StorageUnavailableError):
            await store.get_or_create(1)
    finally:
        await engine.dispose()
