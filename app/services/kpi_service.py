"""
app/services/kpi_service.py

Deterministic ranking and rollup engine.

All calculation functions operate on rows that were already filtered by the
caller. No I/O happens here, and no division can reach the caller as NaN or
infinity.

Formulas
--------
Tax       = revenue * 0.06
Profit    = revenue - investment - tax
ROAS      = revenue / investment            (0 when investment is 0)
Margin    = profit / revenue * 100          (0 when revenue is 0)
CPA       = cluster investment / sales      (0 when sales is 0)
ROI       = cluster revenue / investment    (pending when investment is 0)
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Final, Sequence

from app.domain.performance import (
    Cluster,
    ClusterPerformance,
    ClusterStatus,
    PeriodStats,
    RankingEntry,
    Rollup,
)
from app.domain.sales_table import Row
from app.mappers.column_resolver import ResolvedColumns
from app.mappers.utm_normalizer import MISSING_VALUE, dimension_value
from app.validators.date_parser import parse_date
from app.validators.scalar_parser import coerce_number

logger = logging.getLogger(__name__)

TAX_RATE: Final[float] = 0.06
"""Estimated tax share of gross revenue."""

DEFAULT_TOP_N: Final[int] = 5


class KPIService:
    """
    Stateless, deterministic ranking and rollup calculations.

    Usage::

        service = KPIService()
        rollup = service.rollup(rows, "valor", investment=500.0)
        print(rollup.roas)
    """

    # ------------------------------------------------------------------
    # Rankings
    # ------------------------------------------------------------------

    def top_n(
        self,
        rows: Sequence[Row],
        column: str | None,
        columns: ResolvedColumns,
        n: int = DEFAULT_TOP_N,
    ) -> list[RankingEntry]:
        """
        Most frequent values of ``column``, highest count first.

        Ties keep first-seen order. Blank cells count as ``N/A``; source and
        campaign values are normalized before counting.
        """

        if column is None:
            return []

        counts: dict[str, int] = {}
        for row in rows:
            label = dimension_value(row.get(column), column, columns, empty=MISSING_VALUE).strip()
            counts[label] = counts.get(label, 0) + 1

        ranked = sorted(
            (RankingEntry(name=name, count=count) for name, count in counts.items()),
            key=lambda entry: entry.count,
            reverse=True,
        )
        return ranked[: max(0, n)]

    # ------------------------------------------------------------------
    # Rollup
    # ------------------------------------------------------------------

    def total_revenue(self, rows: Sequence[Row], revenue_column: str | None) -> float:
        if revenue_column is None:
            return 0.0
        return sum(coerce_number(row.get(revenue_column)) for row in rows)

    def rollup(
        self,
        rows: Sequence[Row],
        revenue_column: str | None,
        investment: float,
    ) -> Rollup:
        """
        Summarize revenue, tax, spend, profit and ROAS for ``rows``.

        Parameters
        ----------
        rows:
            Filtered rows.
        revenue_column:
            Resolved revenue header; ``None`` yields zero revenue.
        investment:
            Externally supplied spend: the manual total, or the sum of
            per-cluster spend, depending on the view.
        """

        revenue = self.total_revenue(rows, revenue_column)
        tax = revenue * TAX_RATE
        profit = revenue - investment - tax
        roas = revenue / investment if investment > 0 else 0.0
        margin = profit / revenue * 100 if revenue > 0 else 0.0
        logger.debug(
            "rollup rows=%d revenue=%.2f investment=%.2f profit=%.2f roas=%.4f",
            len(rows),
            revenue,
            investment,
            profit,
            roas,
        )
        return Rollup(
            revenue=revenue,
            tax=tax,
            investment=investment,
            profit=profit,
            roas=roas,
            margin=margin,
        )

    # ------------------------------------------------------------------
    # Cluster performance
    # ------------------------------------------------------------------

    def cluster_performance(self, cluster: Cluster, investment: float) -> ClusterPerformance:
        """
        Join a cluster with its spend.

        Edge cases
        ----------
        * ``sales_count == 0`` -> CPA is ``0.0``.
        * ``investment == 0`` -> ROI is ``None`` and status is ``pending``.
        """

        cpa = investment / cluster.sales_count if cluster.sales_count > 0 else 0.0
        if investment > 0:
            roi: float | None = cluster.revenue / investment
            status = ClusterStatus.PROFIT if cluster.revenue > investment else ClusterStatus.LOSS
        else:
            roi = None
            status = ClusterStatus.PENDING
        return ClusterPerformance(
            cluster=cluster,
            investment=investment,
            cpa=cpa,
            roi=roi,
            status=status,
        )

    # ------------------------------------------------------------------
    # Period counters
    # ------------------------------------------------------------------

    def period_stats(
        self,
        rows: Sequence[Row],
        date_column: str | None,
        *,
        now: datetime | None = None,
    ) -> PeriodStats:
        """
        Count sales dated today, in the last 7 days and in the last 30 days.

        Rows without a parseable date are not counted. Without a date
        column every counter is zero.
        """

        if date_column is None:
            return PeriodStats(today=0, last_7_days=0, last_30_days=0)

        current = now or datetime.now()
        seven_days_ago = current - timedelta(days=7)
        thirty_days_ago = current - timedelta(days=30)

        today = last_7 = last_30 = 0
        for row in rows:
            row_date = parse_date(row.get(date_column))
            if row_date is None:
                continue
            if row_date.date() == current.date():
                today += 1
            if row_date >= seven_days_ago:
                last_7 += 1
            if row_date >= thirty_days_ago:
                last_30 += 1
        return PeriodStats(today=today, last_7_days=last_7, last_30_days=last_30)
