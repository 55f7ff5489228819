"""
Survey results service: fetch a survey and its responses, then tabulate.
"""

from __future__ import annotations

import anyio

from civic.shared.exceptions import NotFoundError, PermissionDeniedError
from civic.shared.logging import get_logger
from civic.surveys.repository import SurveyStore
from civic.surveys.schemas import SurveyResults
from civic.surveys.tabulation import View, tabulate_survey

logger = get_logger(__name__)


class SurveyResultsService:
    def __init__(self, store: SurveyStore) -> None:
        self._store = store

    async def get_results(self, survey_id: str, view: View = "public") -> SurveyResults:
        """Aggregate results for a survey.

        Recomputed on every call from the stored responses.

        Raises:
            NotFoundError: Unknown survey.
            PermissionDeniedError: Public view of a survey whose results are not public.
        """
        survey = await self._store.get_survey(survey_id)
        if survey is None:
            raise NotFoundError("Survey not found", details={"survey_id": survey_id})

        if view == "public" and not survey.show_results:
            raise PermissionDeniedError(
                "Results are not public for this survey",
                details={"survey_id": survey_id},
            )

        responses = await self._store.get_responses(survey_id)

        # CPU-bound: keep it off the event loop
        aggregates = await anyio.to_thread.run_sync(tabulate_survey, survey, responses, view)

        logger.info(
            "Survey results tabulated",
            extra={
                "survey_id": survey_id,
                "view": view,
                "response_count": len(responses),
                "question_count": len(aggregates),
            },
        )

        return SurveyResults(
            survey_id=survey.id,
            title=survey.title,
            view=view,
            response_count=len(responses),
            questions=aggregates,
        )
