"""
Survey tabulation engine.

Turns the flat list of submitted responses into one aggregate per question:
option counts and percentages for choice questions, an average plus a
histogram for rating questions, and a capped verbatim sample for text
questions. Pure and synchronous; a malformed answer is skipped, it never
blanks out the report.
"""

from __future__ import annotations

from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction
from typing import Iterable, Literal, Sequence

from civic.shared.logging import get_logger
from civic.surveys.domain import (
    Answer,
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
from civic.surveys.schemas import (
    Aggregate,
    ChoiceAggregate,
    EmptyAggregate,
    OptionTally,
    RatingAggregate,
    RatingBucket,
    TextAggregate,
)

logger = get_logger(__name__)

View = Literal["admin", "public"]

# Verbatim text samples shown per view
TEXT_SAMPLE_LIMITS: dict[str, int] = {"admin": 5, "public": 10}


def percentage(count: int, total: int) -> int:
    """Whole percentage of count/total, rounding halves away from zero.

    Returns 0 when total is 0.
    """
    if total <= 0:
        return 0
    share = Fraction(count * 100, total)
    rounded = int(abs(share) + Fraction(1, 2))
    return rounded if share >= 0 else -rounded


def format_average(values: Sequence[float]) -> str:
    """Arithmetic mean rendered with one decimal place ("0.0" for no values)."""
    if not values:
        return "0.0"
    mean = sum(Fraction(v) for v in values) / len(values)
    exact = Decimal(mean.numerator) / Decimal(mean.denominator)
    return str(exact.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def collect_answers(question: Question, responses: Iterable[Response]) -> list[Answer]:
    """Well-formed answers to `question`, one per response that answered it."""
    answers: list[Answer] = []
    skipped = 0
    for response in responses:
        raw = response.answers.get(question.id) if response.answers else None
        if raw is None:
            continue
        answer = coerce_answer(question, raw)
        if answer is None:
            skipped += 1
            continue
        answers.append(answer)

    if skipped:
        logger.debug(
            "Skipped malformed answers",
            extra={"question_id": question.id, "skipped": skipped},
        )
    return answers


def tabulate(
    question: Question,
    responses: Sequence[Response],
    view: View = "admin",
) -> Aggregate:
    """Summarize every response's answer to one question.

    Percentages are relative to the respondents who answered this question,
    not to the total number of responses.
    """
    answers = collect_answers(question, responses)
    if not answers:
        return EmptyAggregate(
            question_id=question.id,
            question_text=question.text,
            question_type=question.type,
            answered_count=0,
        )

    qtype = question.type
    if qtype in (QuestionType.MULTIPLE_CHOICE, QuestionType.YES_NO):
        return _tabulate_single_choice(question, answers)
    if qtype == QuestionType.CHECKBOX:
        return _tabulate_multi_choice(question, answers)
    if qtype == QuestionType.RATING:
        return _tabulate_rating(question, answers)
    if qtype.is_text:
        return _tabulate_text(question, answers, TEXT_SAMPLE_LIMITS[view])
    raise ValueError(f"Unsupported question type: {qtype}")


def tabulate_survey(
    survey: Survey,
    responses: Sequence[Response],
    view: View = "admin",
) -> list[Aggregate]:
    """One aggregate per question, in the survey's declared order."""
    relevant = [r for r in responses if r.survey_id == survey.id]
    return [tabulate(q, relevant, view) for q in survey.ordered_questions()]


def _option_tallies(options: Sequence[str], counts: Counter[str], total: int) -> list[OptionTally]:
    return [
        OptionTally(option=opt, count=counts.get(opt, 0), percentage=percentage(counts.get(opt, 0), total))
        for opt in options
    ]


def _tabulate_single_choice(question: Question, answers: list[Answer]) -> ChoiceAggregate:
    counts: Counter[str] = Counter(a.option for a in answers if isinstance(a, ChoiceAnswer))
    total = len(answers)
    return ChoiceAggregate(
        question_id=question.id,
        question_text=question.text,
        question_type=question.type,
        answered_count=total,
        options=_option_tallies(question.effective_options, counts, total),
    )


def _tabulate_multi_choice(question: Question, answers: list[Answer]) -> ChoiceAggregate:
    counts: Counter[str] = Counter()
    for answer in answers:
        if isinstance(answer, MultiChoiceAnswer):
            counts.update(answer.options)
    total = len(answers)
    return ChoiceAggregate(
        question_id=question.id,
        question_text=question.text,
        question_type=question.type,
        answered_count=total,
        options=_option_tallies(question.effective_options, counts, total),
    )


def _tabulate_rating(question: Question, answers: list[Answer]) -> RatingAggregate:
    values = [a.value for a in answers if isinstance(a, RatingAnswer)]
    counts: Counter[int] = Counter(int(v) for v in values if float(v).is_integer())
    rating_count = len(values)

    histogram = [
        RatingBucket(
            rating=rating,
            count=counts.get(rating, 0),
            percentage=percentage(counts.get(rating, 0), rating_count),
        )
        for rating in range(question.min_rating, question.max_rating + 1)
    ]

    return RatingAggregate(
        question_id=question.id,
        question_text=question.text,
        question_type=question.type,
        answered_count=rating_count,
        average=format_average(values),
        rating_count=rating_count,
        min_rating=question.min_rating,
        max_rating=question.max_rating,
        histogram=histogram,
    )


def _tabulate_text(question: Question, answers: list[Answer], limit: int) -> TextAggregate:
    texts = [a.text for a in answers if isinstance(a, TextAnswer)]
    samples = texts[:limit]
    return TextAggregate(
        question_id=question.id,
        question_text=question.text,
        question_type=question.type,
        answered_count=len(texts),
        total=len(texts),
        samples=samples,
        omitted=len(texts) - len(samples),
    )
