"""SQLAlchemy ORM models for the sentence memorizer database."""

from backend.models.attempt_log import AttemptLog
from backend.models.base import Base
from backend.models.memorization_record import MemorizationRecord
from backend.models.sentence_pair import SentencePair

__all__ = ["AttemptLog", "Base", "MemorizationRecord", "SentencePair"]
