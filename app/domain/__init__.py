"""
app/domain package marker.
"""

from app.domain.performance import (
    Cluster,
    ClusterPerformance,
    ClusterStatus,
    DailyCount,
    DashboardView,
    PeriodStats,
    RankingEntry,
    Rollup,
)
from app.domain.query import DatePreset, FilterState, InvestmentInputs, QueryParameters
from app.domain.sales_table import ColumnType, IngestionSummary, Row, Scalar, Table

__all__ = [
    "Cluster",
    "ClusterPerformance",
    "ClusterStatus",
    "ColumnType",
    "DailyCount",
    "DashboardView",
    "DatePreset",
    "FilterState",
    "IngestionSummary",
    "InvestmentInputs",
    "PeriodStats",
    "QueryParameters",
    "RankingEntry",
    "Rollup",
    "Row",
    "Scalar",
    "Table",
]
