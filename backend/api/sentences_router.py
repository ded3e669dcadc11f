"""API routes for managing sentence pairs."""

import logging

from fastapi import APIRouter, Depends, Response, status

from backend.api.schemas import (
    MemorizationRecordResponse,
    SentencePairDetailResponse,
    SentencePairRequest,
    SentencePairResponse,
)
from backend.database import get_store
from backend.srs.pairs import create_pair, delete_pair, get_pair, list_pairs, update_pair
from backend.srs.store import MemorizationStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sentences", tags=["sentences"])


@router.get("", response_model=list[SentencePairResponse])
async def sentences_list(
    store: MemorizationStore = Depends(get_store),
) -> list[SentencePairResponse]:
    """List all sentence pairs, newest first."""
    pairs = await list_pairs(store)
    return [SentencePairResponse.model_validate(pair) for pair in pairs]


@router.post("", response_model=SentencePairResponse, status_code=status.HTTP_201_CREATED)
async def sentences_create(
    request: SentencePairRequest,
    store: MemorizationStore = Depends(get_store),
) -> SentencePairResponse:
    """Create a new sentence pair."""
    pair = await create_pair(store, request.english, request.korean)
    return SentencePairResponse.model_validate(pair)


@router.get("/{pair_id}", response_model=SentencePairDetailResponse)
async def sentences_get(
    pair_id: int,
    store: MemorizationStore = Depends(get_store),
) -> SentencePairDetailResponse:
    """Get a sentence pair with its memorization progress."""
    pair = await get_pair(store, pair_id)
    record = await store.get_record(pair_id)
    return SentencePairDetailResponse(
        id=pair.id,
        english=pair.english,
        korean=pair.korean,
        created_at=pair.created_at,
        updated_at=pair.updated_at,
        record=MemorizationRecordResponse.model_validate(record) if record else None,
    )


@router.put("/{pair_id}", response_model=SentencePairResponse)
async def sentences_update(
    pair_id: int,
    request: SentencePairRequest,
    store: MemorizationStore = Depends(get_store),
) -> SentencePairResponse:
    """Replace the text of a sentence pair; its progress is kept."""
    pair = await update_pair(store, pair_id, request.english, request.korean)
    return SentencePairResponse.model_validate(pair)


@router.delete("/{pair_id}", status_code=status.HTTP_204_NO_CONTENT)
async def sentences_delete(
    pair_id: int,
    store: MemorizationStore = Depends(get_store),
) -> Response:
    """Delete a sentence pair and its progress."""
    await delete_pair(store, pair_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
