"""
API router for survey results.
"""

import hmac
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from civic.config import Settings, get_settings
from civic.shared.database import get_db_session
from civic.surveys.repository import SurveyRepository
from civic.surveys.schemas import SurveyResults
from civic.surveys.service import SurveyResultsService

router = APIRouter(tags=["surveys"])


def get_results_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> SurveyResultsService:
    """Dependency for the survey results service."""
    return SurveyResultsService(store=SurveyRepository(session=session))


async def require_admin_token(
    settings: Annotated[Settings, Depends(get_settings)],
    x_admin_token: Annotated[str | None, Header()] = None,
) -> None:
    expected = settings.admin_api_token
    if not expected or not x_admin_token or not hmac.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin token required")


@router.get(
    "/api/surveys/{survey_id}/results",
    response_model=SurveyResults,
    summary="Public survey results",
    description="Aggregated results for surveys that publish them. Text answers are sampled up to 10.",
)
async def get_public_results(
    survey_id: str,
    service: Annotated[SurveyResultsService, Depends(get_results_service)],
) -> SurveyResults:
    return await service.get_results(survey_id, view="public")


@router.get(
    "/api/admin/surveys/{survey_id}/results",
    response_model=SurveyResults,
    summary="Admin survey results",
    description="Aggregated results regardless of visibility. Text answers are sampled up to 5.",
    dependencies=[Depends(require_admin_token)],
)
async def get_admin_results(
    survey_id: str,
    service: Annotated[SurveyResultsService, Depends(get_results_service)],
) -> SurveyResults:
    return await service.get_results(survey_id, view="admin")
