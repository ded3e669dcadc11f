"""Pydantic schemas for API request/response models."""

from datetime import datetime

from pydantic import BaseModel

# --- Sentences ---


class SentencePairRequest(BaseModel):
    """Request to create or replace a sentence pair."""

    english: str
    korean: str


class SentencePairResponse(BaseModel):
    """A sentence pair as stored."""

    id: int
    english: str
    korean: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MemorizationRecordResponse(BaseModel):
    """Memorization progress for one sentence pair."""

    sentence_pair_id: int
    attempts: int
    correct_attempts: int
    exposure_count: int
    is_memorized: bool
    memorized_at: datetime | None
    last_attempt_at: datetime | None
    difficulty_score: float

    model_config = {"from_attributes": True}


class SentencePairDetailResponse(SentencePairResponse):
    """A sentence pair together with its record, if one exists yet."""

    record: MemorizationRecordResponse | None = None


# --- Study ---


class SubmitRequest(BaseModel):
    """Request to submit a typed translation."""

    sentence_pair_id: int
    user_input: str | None = None
    response_time_ms: int | None = None
    correct_answer: str | None = None  # Defaults to the pair's English text


class SubmitResponse(BaseModel):
    """Response after submitting a translation."""

    is_correct: bool
    expected: str
    feedback: str
    record: MemorizationRecordResponse


class MemorizedRequest(BaseModel):
    """Request to mark a sentence pair as memorized."""

    sentence_pair_id: int


# --- Stats ---


class StudyStatsResponse(BaseModel):
    """Overall study statistics."""

    total_sentences: int
    memorized_sentences: int
    total_attempts: int
    average_accuracy: float | None
    total_study_time_seconds: int
    streak_days: int
    last_study_date: datetime | None
