"""Assessment of typed translations.

A strict, language-naive comparison: both texts are normalized and must
match exactly. No partial credit, no synonym handling.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum

# Anything that is not a letter, digit or whitespace (\w also admits "_")
_PUNCTUATION = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


class AssessmentGrade(Enum):
    """Whether a response matched the reference translation."""

    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass
class Assessment:
    """The result of assessing a learner's response."""

    grade: AssessmentGrade
    feedback: str                # Explanation for the learner
    expected: str                # What the correct answer was
    actual: str                  # What the learner answered

    @property
    def is_correct(self) -> bool:
        return self.grade == AssessmentGrade.CORRECT


def normalize_for_comparison(text: str) -> str:
    """Normalize text for comparison.

    - Unicode NFC normalization
    - Lowercase
    - Remove everything except letters, digits and whitespace
    - Collapse whitespace runs and trim
    """
    text = unicodedata.normalize("NFC", text).lower()
    text = _PUNCTUATION.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def is_correct_answer(response: str, expected: str) -> bool:
    return normalize_for_comparison(response) == normalize_for_comparison(expected)


def assess_translation(response: str, expected: str) -> Assessment:
    """Assess a typed translation against the reference sentence."""
    if is_correct_answer(response, expected):
        return Assessment(
            grade=AssessmentGrade.CORRECT,
            feedback="Correct!",
            expected=expected,
            actual=response,
        )
    return Assessment(
        grade=AssessmentGrade.INCORRECT,
        feedback=f"Expected: {expected}",
        expected=expected,
        actual=response,
    )
