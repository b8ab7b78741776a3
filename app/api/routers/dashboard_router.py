"""
app/api/routers/dashboard_router.py

Dashboard query and spend input endpoints.

Every query recomputes all views from the request body; nothing about the
filters is remembered between calls. Spend inputs are the only state the
endpoints here mutate.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.dashboard import (
    ClusterInvestmentRequest,
    DashboardQueryRequest,
    DashboardResponse,
    InvestmentRequest,
)
from app.services.dashboard_service import (
    DashboardService,
    DatasetNotLoadedError,
    get_dashboard_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.post("/query", response_model=DashboardResponse)
def query_dashboard(
    body: DashboardQueryRequest,
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> DashboardResponse:
    """
    Filter the loaded table and compute clusters, rankings and rollups.

    Raises HTTP 409 when no dataset is loaded.
    """

    try:
        view = dashboard.query(body.to_parameters())
    except DatasetNotLoadedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return DashboardResponse.from_view(view, include_rows=body.include_rows)


@router.put("/investment", status_code=status.HTTP_204_NO_CONTENT)
def set_manual_investment(
    body: InvestmentRequest,
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> None:
    """
    Set the overall spend used by the summary rollup.
    """

    dashboard.set_manual_investment(body.amount)
    logger.info("Manual investment set amount=%.2f", body.amount)


@router.put("/cluster-investment", status_code=status.HTTP_204_NO_CONTENT)
def set_cluster_investment(
    body: ClusterInvestmentRequest,
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> None:
    """
    Set the spend for one source|campaign cluster.
    """

    dashboard.set_cluster_investment(body.cluster_key, body.amount)
    logger.info("Cluster investment set key=%r amount=%.2f", body.cluster_key, body.amount)
