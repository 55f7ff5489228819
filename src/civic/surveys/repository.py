"""
Survey repository for database operations.

Converts ORM rows into the domain types consumed by the tabulation engine.
"""

from typing import Any, Mapping, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from civic.shared.exceptions import NotFoundError, ValidationError
from civic.shared.logging import get_logger
from civic.surveys.domain import Question, Response, Survey
from civic.surveys.models import SurveyQuestionRecord, SurveyRecord, SurveyResponseRecord

logger = get_logger(__name__)


class SurveyStore(Protocol):
    """Read side of the survey store used by the results service."""

    async def get_survey(self, survey_id: str) -> Survey | None:
        ...

    async def get_responses(self, survey_id: str) -> list[Response]:
        ...


def _to_question(record: SurveyQuestionRecord) -> Question:
    question = Question(
        id=record.id,
        type=record.type,
        text=record.text,
        order=record.order,
        required=record.required,
        description=record.description,
        options=tuple(record.options or ()),
        min_rating=record.min_rating,
        max_rating=record.max_rating,
    )
    try:
        question.validate()
    except ValidationError as e:
        # kept as stored so results for the rest of the survey stay available
        logger.warning(
            "Stored question is misconfigured",
            extra={"survey_id": record.survey_id, "error": e.message, "details": e.details},
        )
    return question


def _to_survey(record: SurveyRecord) -> Survey:
    return Survey(
        id=record.id,
        title=record.title,
        status=record.status,
        show_results=record.show_results,
        allow_anonymous=record.allow_anonymous,
        description=record.description,
        questions=[_to_question(q) for q in record.questions],
    )


def _to_response(record: SurveyResponseRecord) -> Response:
    return Response(
        survey_id=record.survey_id,
        answers=dict(record.answers or {}),
        respondent_id=record.respondent_id,
        created_at=record.created_at,
    )


class SurveyRepository:
    """Repository for survey database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async database session.
        """
        self._session = session

    async def get_survey(self, survey_id: str) -> Survey | None:
        record = await self._session.get(SurveyRecord, survey_id)
        if record is None:
            return None
        return _to_survey(record)

    async def get_responses(self, survey_id: str) -> list[Response]:
        """All responses of a survey, oldest first."""
        stmt = (
            select(SurveyResponseRecord)
            .where(SurveyResponseRecord.survey_id == survey_id)
            .order_by(SurveyResponseRecord.created_at, SurveyResponseRecord.id)
        )
        result = await self._session.execute(stmt)
        return [_to_response(r) for r in result.scalars().all()]

    async def has_responded(self, survey_id: str, respondent_id: str) -> bool:
        stmt = select(func.count(SurveyResponseRecord.id)).where(
            SurveyResponseRecord.survey_id == survey_id,
            SurveyResponseRecord.respondent_id == respondent_id,
        )
        result = await self._session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def add_response(
        self,
        survey_id: str,
        answers: Mapping[str, Any],
        respondent_id: str | None = None,
    ) -> Response:
        """Store a submitted response.

        A named respondent may answer a survey only once; anonymous
        submissions (respondent_id None) are not limited.

        Raises:
            NotFoundError: Unknown survey.
            ValidationError: Respondent already answered this survey.
        """
        survey = await self._session.get(SurveyRecord, survey_id)
        if survey is None:
            raise NotFoundError("Survey not found", details={"survey_id": survey_id})

        if respondent_id is not None and await self.has_responded(survey_id, respondent_id):
            raise ValidationError(
                "You have already responded to this survey",
                details={"survey_id": survey_id},
            )

        record = SurveyResponseRecord(
            survey_id=survey_id,
            respondent_id=respondent_id,
            answers=dict(answers),
        )
        self._session.add(record)
        await self._session.flush()
        await self._session.refresh(record)
        return _to_response(record)
