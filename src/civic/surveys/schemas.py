"""
Pydantic schemas for survey result aggregates.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from civic.surveys.domain import QuestionType


NO_RESPONSES_MESSAGE = "No responses yet."


class AggregateBase(BaseModel):
    """Fields shared by every per-question aggregate."""

    question_id: str
    question_text: str
    question_type: QuestionType
    answered_count: int = Field(ge=0)

    model_config = {"frozen": True}


class EmptyAggregate(AggregateBase):
    kind: Literal["empty"] = "empty"
    message: str = NO_RESPONSES_MESSAGE


class OptionTally(BaseModel):
    option: str
    count: int = Field(ge=0)
    percentage: int = Field(ge=0, le=100)

    model_config = {"frozen": True}


class ChoiceAggregate(AggregateBase):
    kind: Literal["choice"] = "choice"
    options: list[OptionTally]


class RatingBucket(BaseModel):
    rating: int
    count: int = Field(ge=0)
    percentage: int = Field(ge=0, le=100)

    model_config = {"frozen": True}


class RatingAggregate(AggregateBase):
    kind: Literal["rating"] = "rating"
    average: str = Field(description="Mean rating rendered with one decimal place")
    rating_count: int = Field(ge=0)
    min_rating: int
    max_rating: int
    histogram: list[RatingBucket]


class TextAggregate(AggregateBase):
    kind: Literal["text"] = "text"
    total: int = Field(ge=0)
    samples: list[str]
    omitted: int = Field(ge=0)


Aggregate = Annotated[
    Union[EmptyAggregate, ChoiceAggregate, RatingAggregate, TextAggregate],
    Field(discriminator="kind"),
]


class SurveyResults(BaseModel):
    """Tabulated results of one survey, one aggregate per question in order."""

    survey_id: str
    title: str
    view: Literal["admin", "public"]
    response_count: int = Field(ge=0)
    questions: list[Aggregate]
