"""
app/domain/performance.py

Derived views computed from a filtered row set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from app.domain.sales_table import Row


class ClusterStatus:
    PROFIT = "profit"
    LOSS = "loss"
    PENDING = "pending"


@dataclass(frozen=True)
class Cluster:
    """
    Sales bucket keyed by normalized source + normalized campaign.
    """

    key: str
    source: str
    campaign: str
    sales_count: int
    revenue: float
    min_date: str
    max_date: str
    products: Mapping[str, int] = field(default_factory=dict)
    contents: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "products", MappingProxyType(dict(self.products)))
        object.__setattr__(self, "contents", tuple(self.contents))


@dataclass(frozen=True)
class ClusterPerformance:
    """
    A cluster joined with its manually entered spend.

    ``roi`` is ``None`` while no spend has been entered.
    """

    cluster: Cluster
    investment: float
    cpa: float
    roi: float | None
    status: str


@dataclass(frozen=True)
class RankingEntry:
    name: str
    count: int


@dataclass(frozen=True)
class Rollup:
    """
    Whole-set summary statistics for the filtered rows.
    """

    revenue: float
    tax: float
    investment: float
    profit: float
    roas: float
    margin: float


@dataclass(frozen=True)
class PeriodStats:
    today: int
    last_7_days: int
    last_30_days: int


@dataclass(frozen=True)
class DailyCount:
    date: str
    count: int


@dataclass(frozen=True)
class DashboardView:
    """
    Every derived view for one query snapshot.
    """

    rows: tuple[Row, ...]
    clusters: tuple[ClusterPerformance, ...]
    top_campaigns: tuple[RankingEntry, ...]
    top_sources: tuple[RankingEntry, ...]
    top_products: tuple[RankingEntry, ...]
    rollup: Rollup
    cluster_rollup: Rollup
    period_stats: PeriodStats
    evolution: tuple[DailyCount, ...]
    filter_options: Mapping[str, tuple[str, ...]]

    @property
    def row_count(self) -> int:
        return len(self.rows)
