"""Create, read, update and delete sentence pairs.

Deleting a pair cascades to its memorization record and attempt logs.
Editing a pair's text leaves its record untouched.
"""

import csv
import json
import logging
from pathlib import Path

from sqlalchemy import select

from backend.models.sentence_pair import SentencePair
from backend.srs.errors import InvalidInputError, NotFoundError
from backend.srs.store import MemorizationStore

logger = logging.getLogger(__name__)


def _clean(text: str | None, field_name: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise InvalidInputError(f"{field_name} sentence is required")
    return cleaned


async def create_pair(store: MemorizationStore, english: str, korean: str) -> SentencePair:
    pair = SentencePair(english=_clean(english, "English"), korean=_clean(korean, "Korean"))
    async with store.session() as db:
        db.add(pair)
        await db.commit()
    logger.info("Created sentence pair %d", pair.id)
    return pair


async def list_pairs(store: MemorizationStore) -> list[SentencePair]:
    """Return all pairs, newest first."""
    stmt = select(SentencePair).order_by(SentencePair.created_at.desc(), SentencePair.id.desc())
    async with store.session() as db:
        return list((await db.execute(stmt)).scalars().all())


async def get_pair(store: MemorizationStore, pair_id: int) -> SentencePair:
    async with store.session() as db:
        pair = await db.get(SentencePair, pair_id)
    if pair is None:
        raise NotFoundError(pair_id)
    return pair


async def update_pair(
    store: MemorizationStore,
    pair_id: int,
    english: str,
    korean: str,
) -> SentencePair:
    """Replace both texts of a pair."""
    english = _clean(english, "English")
    korean = _clean(korean, "Korean")
    async with store.session() as db:
        pair = await db.get(SentencePair, pair_id)
        if pair is None:
            raise NotFoundError(pair_id)
        pair.english = english
        pair.korean = korean
        await db.commit()
    logger.info("Updated sentence pair %d", pair_id)
    return pair


async def delete_pair(store: MemorizationStore, pair_id: int) -> None:
    async with store.session() as db:
        pair = await db.get(SentencePair, pair_id)
        if pair is None:
            raise NotFoundError(pair_id)
        await db.delete(pair)
        await db.commit()
    logger.info("Deleted sentence pair %d", pair_id)


def read_pair_entries(path: Path) -> list[dict[str, str]]:
    """Read raw pair entries from a JSON or CSV file.

    JSON files hold a list of {"english": ..., "korean": ...} objects; CSV
    files need "english" and "korean" header columns.
    """
    try:
        if path.suffix.lower() == ".csv":
            with path.open(encoding="utf-8", newline="") as f:
                return list(csv.DictReader(f))
        entries = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise InvalidInputError(f"Cannot read {path}: {exc}") from exc
    if not isinstance(entries, list):
        raise InvalidInputError(f"{path} must contain a list of sentence pairs")
    return entries


async def import_pairs(store: MemorizationStore, entries: list[dict[str, str]]) -> int:
    """Insert new pairs, skipping duplicates and incomplete rows.

    A pair is a duplicate when its English text already exists. Returns the
    number of pairs inserted.
    """
    loaded = 0
    async with store.session() as db:
        existing = set((await db.execute(select(SentencePair.english))).scalars().all())
        for entry in entries:
            english = (entry.get("english") or "").strip()
            korean = (entry.get("korean") or "").strip()
            if not english or not korean:
                logger.warning("Skipping incomplete entry: %s", entry)
                continue
            if english in existing:
                logger.info("Skipping duplicate: %s", english)
                continue

            db.add(SentencePair(english=english, korean=korean))
            existing.add(english)
            loaded += 1

        await db.commit()

    logger.info("Imported %d sentence pairs", loaded)
    return loaded
