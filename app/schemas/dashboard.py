"""
app/schemas/dashboard.py

Request and response schemas for dashboard query endpoints.
"""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from app.domain.performance import ClusterPerformance, DashboardView, RankingEntry, Rollup
from app.domain.query import FilterState, QueryParameters

DatePresetLiteral = Literal["all", "today", "last_7_days", "last_15_days", "last_30_days", "custom"]


class DashboardQueryRequest(BaseModel):
    """
    Operator inputs for one dashboard computation.
    """

    filters: dict[str, list[str]] = Field(default_factory=dict)
    search_term: str = ""
    date_preset: DatePresetLiteral = "all"
    custom_start: date | None = None
    custom_end: date | None = None
    include_rows: bool = True

    def to_parameters(self) -> QueryParameters:
        return QueryParameters(
            filters=FilterState.from_lists(self.filters),
            search_term=self.search_term,
            date_preset=self.date_preset,
            custom_start=self.custom_start,
            custom_end=self.custom_end,
        )


class InvestmentRequest(BaseModel):
    amount: float = Field(..., ge=0)


class ClusterInvestmentRequest(BaseModel):
    cluster_key: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)


class RowResponse(BaseModel):
    row_id: int
    values: dict[str, float | str]


class ClusterResponse(BaseModel):
    key: str
    source: str
    campaign: str
    sales_count: int
    revenue: float
    min_date: str
    max_date: str
    products: dict[str, int]
    contents: list[str]
    investment: float
    cpa: float
    roi: float | None
    status: str

    @classmethod
    def from_performance(cls, performance: ClusterPerformance) -> "ClusterResponse":
        cluster = performance.cluster
        return cls(
            key=cluster.key,
            source=cluster.source,
            campaign=cluster.campaign,
            sales_count=cluster.sales_count,
            revenue=cluster.revenue,
            min_date=cluster.min_date,
            max_date=cluster.max_date,
            products=dict(cluster.products),
            contents=list(cluster.contents),
            investment=performance.investment,
            cpa=performance.cpa,
            roi=performance.roi,
            status=performance.status,
        )


class RankingResponse(BaseModel):
    name: str
    count: int

    @classmethod
    def from_entry(cls, entry: RankingEntry) -> "RankingResponse":
        return cls(name=entry.name, count=entry.count)


class RollupResponse(BaseModel):
    revenue: float
    tax: float
    investment: float
    profit: float
    roas: float
    margin: float

    @classmethod
    def from_rollup(cls, rollup: Rollup) -> "RollupResponse":
        return cls(
            revenue=rollup.revenue,
            tax=rollup.tax,
            investment=rollup.investment,
            profit=rollup.profit,
            roas=rollup.roas,
            margin=rollup.margin,
        )


class PeriodStatsResponse(BaseModel):
    today: int
    last_7_days: int
    last_30_days: int


class DailyCountResponse(BaseModel):
    date: str
    count: int


class DashboardResponse(BaseModel):
    """
    Every derived view for one query.
    """

    row_count: int = Field(..., ge=0)
    rows: list[RowResponse] = Field(default_factory=list)
    clusters: list[ClusterResponse]
    top_campaigns: list[RankingResponse]
    top_sources: list[RankingResponse]
    top_products: list[RankingResponse]
    rollup: RollupResponse
    cluster_rollup: RollupResponse
    period_stats: PeriodStatsResponse
    evolution: list[DailyCountResponse]
    filter_options: dict[str, list[str]]

    @classmethod
    def from_view(cls, view: DashboardView, *, include_rows: bool = True) -> "DashboardResponse":
        return cls(
            row_count=view.row_count,
            rows=[
                RowResponse(row_id=row.row_id, values=dict(row.values))
                for row in view.rows
            ]
            if include_rows
            else [],
            clusters=[ClusterResponse.from_performance(item) for item in view.clusters],
            top_campaigns=[RankingResponse.from_entry(item) for item in view.top_campaigns],
            top_sources=[RankingResponse.from_entry(item) for item in view.top_sources],
            top_products=[RankingResponse.from_entry(item) for item in view.top_products],
            rollup=RollupResponse.from_rollup(view.rollup),
            cluster_rollup=RollupResponse.from_rollup(view.cluster_rollup),
            period_stats=PeriodStatsResponse(
                today=view.period_stats.today,
                last_7_days=view.period_stats.last_7_days,
                last_30_days=view.period_stats.last_30_days,
            ),
            evolution=[DailyCountResponse(date=item.date, count=item.count) for item in view.evolution],
            filter_options={column: list(values) for column, values in view.filter_options.items()},
        )
