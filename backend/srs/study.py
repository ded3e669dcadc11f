"""Study flow: pick the next pair, then score and record an answer.

Composes the scheduler (pure ranking) with the record store (persistence).
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime

from backend.models.memorization_record import MemorizationRecord
from backend.models.sentence_pair import SentencePair
from backend.srs.assessment import Assessment, assess_translation
from backend.srs.errors import InvalidInputError, NotFoundError
from backend.srs.pairs import get_pair
from backend.srs.scheduler import Candidate, select_next
from backend.srs.store import MemorizationStore, check_response_time

logger = logging.getLogger(__name__)

SELECTION_ATTEMPTS = 3


@dataclass
class SubmissionResult:
    """An assessed answer and the record it updated."""

    assessment: Assessment
    record: MemorizationRecord


async def next_pair(
    store: MemorizationStore,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> SentencePair | None:
    """Select the pair to present next, creating its record on first selection.

    A pair deleted between loading the candidates and creating its record is
    skipped and the selection is repeated over a fresh snapshot. Returns None
    when there are no sentence pairs.
    """
    for attempt in range(1, SELECTION_ATTEMPTS + 1):
        rows = await store.load_candidates()
        pair = select_next((Candidate.from_row(p, r) for p, r in rows), now=now, rng=rng)
        if pair is None:
            logger.info("No sentence pairs available for study")
            return None

        try:
            await store.get_or_create(pair.id)
        except NotFoundError:
            if attempt == SELECTION_ATTEMPTS:
                raise
            logger.info("Pair %d was deleted during selection, selecting again", pair.id)
            continue

        logger.debug("Selected pair %d out of %d", pair.id, len(rows))
        return pair
    return None


async def submit_answer(
    store: MemorizationStore,
    pair_id: int,
    response: str,
    response_time_ms: int,
    expected: str | None = None,
) -> SubmissionResult:
    """Assess a typed translation and record the attempt.

    Args:
        store: The record store.
        pair_id: The sentence pair being answered.
        response: The learner's typed English sentence.
        response_time_ms: How long the answer took in milliseconds.
        expected: Reference answer; defaults to the pair's English text.

    Returns:
        The assessment together with the updated record.
    """
    if response is None:
        raise InvalidInputError("response is required")
    check_response_time(response_time_ms)

    if expected is None:
        expected = (await get_pair(store, pair_id)).english

    assessment = assess_translation(response, expected)
    record = await store.record_attempt(pair_id, assessment.is_correct, response_time_ms)
    return SubmissionResult(assessment=assessment, record=record)
