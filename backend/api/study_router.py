"""API routes for the study loop."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.api.schemas import (
    MemorizationRecordResponse,
    MemorizedRequest,
    SentencePairResponse,
    SubmitRequest,
    SubmitResponse,
)
from backend.database import get_store
from backend.srs.store import MemorizationStore
from backend.srs.study import next_pair, submit_answer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/study", tags=["study"])


@router.get("/next", response_model=SentencePairResponse)
async def study_next(store: MemorizationStore = Depends(get_store)) -> SentencePairResponse:
    """Get the sentence pair to study next."""
    pair = await next_pair(store)
    if pair is None:
        raise HTTPException(status_code=404, detail="No sentences available for study")
    return SentencePairResponse.model_validate(pair)


@router.post("/submit", response_model=SubmitResponse)
async def study_submit(
    request: SubmitRequest,
    store: MemorizationStore = Depends(get_store),
) -> SubmitResponse:
    """Submit a typed translation for a sentence pair."""
    result = await submit_answer(
        store,
        pair_id=request.sentence_pair_id,
        response=request.user_input,
        response_time_ms=request.response_time_ms,
        expected=request.correct_answer,
    )
    return SubmitResponse(
        is_correct=result.assessment.is_correct,
        expected=result.assessment.expected,
        feedback=result.assessment.feedback,
        record=MemorizationRecordResponse.model_validate(result.record),
    )


@router.post("/memorized", response_model=MemorizationRecordResponse)
async def study_memorized(
    request: MemorizedRequest,
    store: MemorizationStore = Depends(get_store),
) -> MemorizationRecordResponse:
    """Mark a sentence pair as memorized."""
    record = await store.mark_memorized(request.sentence_pair_id)
    return MemorizationRecordResponse.model_validate(record)
