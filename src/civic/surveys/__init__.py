"""
Surveys: domain model, response tabulation and results API.
"""

from civic.surveys.domain import (
    Question,
    QuestionType,
    Response,
    Survey,
    SurveyStatus,
    coerce_answer,
)
from civic.surveys.tabulation import percentage, tabulate, tabulate_survey

__all__ = [
    "Question",
    "QuestionType",
    "Response",
    "Survey",
    "SurveyStatus",
    "coerce_answer",
    "percentage",
    "tabulate",
    "tabulate_survey",
]
