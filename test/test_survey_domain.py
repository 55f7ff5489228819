"""
Tests for survey domain types and answer coercion.
"""

import math

import pytest

from civic.shared.exceptions import ValidationError
from civic.surveys.domain import (
    ChoiceAnswer,
    MultiChoiceAnswer,
    Question,
    QuestionType,
    RatingAnswer,
    Response,
    Survey,
    TextAnswer,
    coerce_answer,
)


def _q(qtype: QuestionType, **kwargs) -> Question:
    return Question(id="q", type=qtype, text="?", **kwargs)


class TestCoerceAnswer:
    def test_absent_value(self) -> None:
        for qtype in QuestionType:
            assert coerce_answer(_q(qtype), None) is None

    def test_single_choice(self) -> None:
        q = _q(QuestionType.MULTIPLE_CHOICE, options=("A", "B"))
        assert coerce_answer(q, " A ") == ChoiceAnswer("A")
        assert coerce_answer(q, "") is None
        assert coerce_answer(q, ["A"]) is None

    @pytest.mark.parametrize("raw", [True, "yes", "Yes", "Y", "true"])
    def test_yes_no_truthy(self, raw) -> None:
        assert coerce_answer(_q(QuestionType.YES_NO), raw) == ChoiceAnswer("Yes")

    @pytest.mark.parametrize("raw", [False, "no", "No", "n", "FALSE"])
    def test_yes_no_falsy(self, raw) -> None:
        assert coerce_answer(_q(QuestionType.YES_NO), raw) == ChoiceAnswer("No")

    def test_multi_choice(self) -> None:
        q = _q(QuestionType.CHECKBOX, options=("X", "Y"))
        assert coerce_answer(q, ["X", "Y", "X"]) == MultiChoiceAnswer(frozenset({"X", "Y"}))
        assert coerce_answer(q, "X") == MultiChoiceAnswer(frozenset({"X"}))
        assert coerce_answer(q, []) is None
        assert coerce_answer(q, ["X", {"bad": 1}]) is None

    def test_rating(self) -> None:
        q = _q(QuestionType.RATING)
        assert coerce_answer(q, 4) == RatingAnswer(4.0)
        assert coerce_answer(q, "3.5") == RatingAnswer(3.5)
        assert coerce_answer(q, True) is None
        assert coerce_answer(q, "abc") is None
        assert coerce_answer(q, math.nan) is None
        assert coerce_answer(q, "inf") is None
        assert coerce_answer(q, 10**400) is None

    def test_text(self) -> None:
        q = _q(QuestionType.LONG_TEXT)
        assert coerce_answer(q, "  hello ") == TextAnswer("  hello ")
        assert coerce_answer(q, "   ") is None
        assert coerce_answer(q, ["a"]) is None

    @pytest.mark.parametrize(
        "qtype", [QuestionType.SHORT_TEXT, QuestionType.MULTIPLE_CHOICE, QuestionType.YES_NO]
    )
    def test_integer_too_large_to_render(self, qtype: QuestionType) -> None:
        assert coerce_answer(_q(qtype, options=("A", "B")), 10**5000) is None


class TestQuestion:
    def test_yes_no_effective_options(self) -> None:
        assert _q(QuestionType.YES_NO).effective_options == ("Yes", "No")
        assert _q(QuestionType.YES_NO, options=("Sure",)).effective_options == ("Yes", "No")

    def test_choice_needs_two_options(self) -> None:
        with pytest.raises(ValidationError):
            _q(QuestionType.MULTIPLE_CHOICE, options=("A",)).validate()
        _q(QuestionType.CHECKBOX, options=("A", "B")).validate()

    def test_rating_range(self) -> None:
        with pytest.raises(ValidationError):
            _q(QuestionType.RATING, min_rating=5, max_rating=5).validate()
        _q(QuestionType.RATING, min_rating=0, max_rating=10).validate()


class TestSurvey:
    def test_ordered_questions_stable(self) -> None:
        survey = Survey(
            id="s",
            title="t",
            questions=[
                Question(id="b", type=QuestionType.SHORT_TEXT, text="b", order=1),
                Question(id="a", type=QuestionType.SHORT_TEXT, text="a", order=0),
                Question(id="c", type=QuestionType.SHORT_TEXT, text="c", order=1),
            ],
        )
        assert [q.id for q in survey.ordered_questions()] == ["a", "b", "c"]

    def test_response_anonymity(self) -> None:
        assert Response(survey_id="s").is_anonymous
        assert not Response(survey_id="s", respondent_id="u1").is_anonymous
