"""
app/services package marker.
"""

from app.services.aggregation_service import AggregationService
from app.services.csv_ingestion_service import (
    CSVDecodeError,
    CSVIngestionError,
    CSVIngestionService,
    CSVUploadTooLargeError,
    build_table,
    get_csv_ingestion_service,
)
from app.services.dashboard_service import (
    DashboardService,
    DatasetNotLoadedError,
    compute_dashboard_view,
    get_dashboard_service,
)
from app.services.filter_service import FilterService
from app.services.insight_service import (
    InsightGenerationError,
    InsightNotConfiguredError,
    InsightService,
    get_insight_service,
)
from app.services.kpi_service import KPIService

__all__ = [
    "AggregationService",
    "CSVDecodeError",
    "CSVIngestionError",
    "CSVIngestionService",
    "CSVUploadTooLargeError",
    "DashboardService",
    "DatasetNotLoadedError",
    "FilterService",
    "InsightGenerationError",
    "InsightNotConfiguredError",
    "InsightService",
    "KPIService",
    "build_table",
    "compute_dashboard_view",
    "get_csv_ingestion_service",
    "get_dashboard_service",
    "get_insight_service",
]
