"""
app/schemas package marker.
"""

from app.schemas.csv_ingestion import DatasetResponse, IngestionSummaryResponse, SheetLoadRequest
from app.schemas.dashboard import (
    ClusterInvestmentRequest,
    DashboardQueryRequest,
    DashboardResponse,
    InvestmentRequest,
)
from app.schemas.insight import InsightResponse

__all__ = [
    "ClusterInvestmentRequest",
    "DashboardQueryRequest",
    "DashboardResponse",
    "DatasetResponse",
    "IngestionSummaryResponse",
    "InsightResponse",
    "InvestmentRequest",
    "SheetLoadRequest",
]
