"""English/Korean sentence pair model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin


class SentencePair(Base, TimestampMixin):
    """A sentence and its translation, studied as one flashcard."""

    __tablename__ = "sentence_pairs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    english: Mapped[str] = mapped_column(String(1000), nullable=False)  # Typed by the learner
    korean: Mapped[str] = mapped_column(String(1000), nullable=False)  # Shown as the prompt

    record: Mapped["MemorizationRecord"] = relationship(  # type: ignore[name-defined] # noqa: F821
        back_populates="sentence_pair", uselist=False, cascade="all, delete-orphan"
    )
    attempt_logs: Mapped[list["AttemptLog"]] = relationship(  # type: ignore[name-defined] # noqa: F821
        back_populates="sentence_pair", cascade="all, delete-orphan"
    )
