"""
app/api/routers/insight_router.py

AI narrative endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.insight import InsightResponse
from app.services.dashboard_service import (
    DashboardService,
    DatasetNotLoadedError,
    get_dashboard_service,
)
from app.services.insight_service import (
    InsightGenerationError,
    InsightNotConfiguredError,
    InsightService,
    get_insight_service,
)

router = APIRouter(tags=["insights"])


def resolve_insight_service() -> InsightService:
    try:
        return get_insight_service()
    except InsightNotConfiguredError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        ) from exc


@router.post("/insights", response_model=InsightResponse)
def generate_insights(
    dashboard: DashboardService = Depends(get_dashboard_service),
    insight_service: InsightService = Depends(resolve_insight_service),
) -> InsightResponse:
    """
    Ask the configured LLM for a narrative over the loaded table.
    """

    try:
        text = dashboard.generate_insight(insight_service)
    except DatasetNotLoadedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except InsightGenerationError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return InsightResponse(text=text)
