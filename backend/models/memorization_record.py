"""Per-pair memorization progress model."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin
from backend.srs.scheduler import DEFAULT_DIFFICULTY


class MemorizationRecord(Base, TimestampMixin):
    """Attempt counters, difficulty score and memorized flag for one sentence pair."""

    __tablename__ = "memorization_records"
    __table_args__ = (
        CheckConstraint("correct_attempts <= attempts", name="ck_correct_le_attempts"),
        CheckConstraint(
            "difficulty_score >= 0 AND difficulty_score <= 1", name="ck_difficulty_range"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Unique so concurrent lazy creation converges on one row per pair
    sentence_pair_id: Mapped[int] = mapped_column(
        ForeignKey("sentence_pairs.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    exposure_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_memorized: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    memorized_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    last_attempt_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)  # None = never attempted
    difficulty_score: Mapped[float] = mapped_column(
        Float, nullable=False, default=DEFAULT_DIFFICULTY, index=True
    )

    sentence_pair: Mapped["SentencePair"] = relationship(back_populates="record")  # type: ignore[name-defined] # noqa: F821
