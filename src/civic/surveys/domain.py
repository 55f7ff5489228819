"""
Domain models for surveys and their responses.

Answers are modelled as a tagged union keyed by the owning question's type:
`coerce_answer` turns a raw stored value into exactly one variant, or None
when the value is absent or malformed.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from numbers import Real
from typing import Any, Mapping, Union

from civic.shared.exceptions import ValidationError


YES_NO_OPTIONS: tuple[str, str] = ("Yes", "No")

_YES_WORDS = {"yes", "y", "true"}
_NO_WORDS = {"no", "n", "false"}


# ============================================================
# Enums
# ============================================================

class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"  # single selection
    CHECKBOX = "checkbox"                # multi selection
    RATING = "rating"
    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    YES_NO = "yes_no"

    @property
    def is_choice(self) -> bool:
        return self in (QuestionType.MULTIPLE_CHOICE, QuestionType.CHECKBOX)

    @property
    def is_text(self) -> bool:
        return self in (QuestionType.SHORT_TEXT, QuestionType.LONG_TEXT)


class SurveyStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"


# ============================================================
# Survey definition
# ============================================================

@dataclass(frozen=True)
class Question:
    """A single typed question of a survey."""
    id: str
    type: QuestionType
    text: str
    order: int = 0
    required: bool = False
    description: str | None = None
    options: tuple[str, ...] = ()
    min_rating: int = 1
    max_rating: int = 5

    @property
    def effective_options(self) -> tuple[str, ...]:
        """Options used for tallying; yes/no questions always use Yes/No."""
        if self.type == QuestionType.YES_NO:
            return YES_NO_OPTIONS
        return self.options

    def validate(self) -> None:
        if self.type.is_choice and len(self.options) < 2:
            raise ValidationError(
                "Choice questions need at least two options",
                details={"question_id": self.id, "options": list(self.options)},
            )
        if self.type == QuestionType.RATING and self.min_rating >= self.max_rating:
            raise ValidationError(
                "Rating range minimum must be below its maximum",
                details={"question_id": self.id, "min": self.min_rating, "max": self.max_rating},
            )


@dataclass
class Survey:
    id: str
    title: str
    status: SurveyStatus = SurveyStatus.ACTIVE
    show_results: bool = False
    allow_anonymous: bool = False
    description: str | None = None
    questions: list[Question] = field(default_factory=list)

    def ordered_questions(self) -> list[Question]:
        # sorted() is stable: ties keep their declared position
        return sorted(self.questions, key=lambda q: q.order)


@dataclass
class Response:
    """One submitted response; answers map question id to the raw stored value."""
    survey_id: str
    answers: Mapping[str, Any] = field(default_factory=dict)
    respondent_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_anonymous(self) -> bool:
        return self.respondent_id is None


# ============================================================
# Answer variants
# ============================================================

@dataclass(frozen=True)
class ChoiceAnswer:
    option: str


@dataclass(frozen=True)
class MultiChoiceAnswer:
    options: frozenset[str]


@dataclass(frozen=True)
class RatingAnswer:
    value: float


@dataclass(frozen=True)
class TextAnswer:
    text: str


Answer = Union[ChoiceAnswer, MultiChoiceAnswer, RatingAnswer, TextAnswer]


def _as_text(value: Any) -> str | None:
    """str() of a scalar; None for other types or ints too large to render."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    if isinstance(value, str):
        return value
    try:
        return str(value)
    except ValueError:
        return None


def _clean_label(value: Any) -> str | None:
    text = _as_text(value)
    if text is None:
        return None
    return text.strip() or None


def _coerce_yes_no(raw: Any) -> ChoiceAnswer | None:
    if isinstance(raw, bool):
        return ChoiceAnswer(YES_NO_OPTIONS[0] if raw else YES_NO_OPTIONS[1])
    label = _clean_label(raw)
    if label is None:
        return None
    lowered = label.lower()
    if lowered in _YES_WORDS:
        return ChoiceAnswer(YES_NO_OPTIONS[0])
    if lowered in _NO_WORDS:
        return ChoiceAnswer(YES_NO_OPTIONS[1])
    return ChoiceAnswer(label)


def _coerce_multi(raw: Any) -> MultiChoiceAnswer | None:
    if isinstance(raw, (list, tuple, set, frozenset)):
        labels = [_clean_label(v) for v in raw]
        if any(label is None for label in labels):
            return None
    else:
        labels = [_clean_label(raw)]
        if labels[0] is None:
            return None
    options = frozenset(label for label in labels if label)
    if not options:
        return None
    return MultiChoiceAnswer(options)


def _coerce_rating(raw: Any) -> RatingAnswer | None:
    if isinstance(raw, bool):
        return None
    if not isinstance(raw, (Real, str)):
        return None
    try:
        value = float(raw.strip() if isinstance(raw, str) else raw)
    except (OverflowError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return RatingAnswer(value)


def coerce_answer(question: Question, raw: Any) -> Answer | None:
    """Build the answer variant for `question` from a raw stored value.

    Returns None for absent, blank or malformed values so that callers can
    skip them without aborting a whole report.
    """
    if raw is None:
        return None

    qtype = question.type
    if qtype == QuestionType.YES_NO:
        return _coerce_yes_no(raw)
    if qtype == QuestionType.MULTIPLE_CHOICE:
        label = _clean_label(raw)
        return ChoiceAnswer(label) if label is not None else None
    if qtype == QuestionType.CHECKBOX:
        return _coerce_multi(raw)
    if qtype == QuestionType.RATING:
        return _coerce_rating(raw)
    if qtype.is_text:
        # kept verbatim; whitespace-only counts as unanswered
        text = _as_text(raw)
        return TextAnswer(text) if text is not None and text.strip() else None
    return None
