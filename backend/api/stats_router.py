"""API routes for study statistics."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends

from backend.api.schemas import StudyStatsResponse
from backend.database import get_store
from backend.srs.stats import compute_stats
from backend.srs.store import MemorizationStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=StudyStatsResponse)
async def get_study_stats(store: MemorizationStore = Depends(get_store)) -> StudyStatsResponse:
    """Get overall study statistics."""
    stats = await compute_stats(store)
    return StudyStatsResponse(**asdict(stats))
