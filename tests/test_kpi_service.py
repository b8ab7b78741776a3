"""
tests/test_kpi_service.py

Pytest unit tests for KPIService.

All tests are pure Python with in-memory rows only. Every assertion is
deterministic: given the same inputs, the same output must be produced
every time.

Coverage
--------
- Top-N rankings, ties and blank values
- Rollup tax, profit, ROAS and margin
- Zero investment and zero revenue edge cases
- Cluster CPA, ROI and status
- Period counters relative to a fixed instant
- Statelessness across multiple calls
"""

from __future__ import annotations

from datetime import datetime

import pytest

from app.domain.performance import Cluster, ClusterStatus
from app.domain.sales_table import Row
from app.mappers.column_resolver import ResolvedColumns
from app.services.kpi_service import TAX_RATE, KPIService

COLUMNS = ResolvedColumns(date="data", product="produto", revenue="valor", source="origem", campaign="campanha")

NOW = datetime(2024, 1, 10, 15, 0)


def _row(row_id: int, **values) -> Row:
    return Row(row_id=row_id, values=values)


def _cluster(sales_count: int = 2, revenue: float = 300.0) -> Cluster:
    return Cluster(
        key="facebook|Promo",
        source="facebook",
        campaign="Promo",
        sales_count=sales_count,
        revenue=revenue,
        min_date="01/01/2024",
        max_date="02/01/2024",
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def svc() -> KPIService:
    """Fresh KPIService instance for each test."""
    return KPIService()


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------


class TestTopN:
    def test_highest_count_first(self, svc: KPIService) -> None:
        rows = [_row(i, produto=name) for i, name in enumerate(["A", "B", "B", "C", "B", "A"])]
        ranking = svc.top_n(rows, "produto", COLUMNS)
        assert [(entry.name, entry.count) for entry in ranking] == [("B", 3), ("A", 2), ("C", 1)]

    def test_ties_keep_first_seen_order(self, svc: KPIService) -> None:
        rows = [_row(i, produto=name) for i, name in enumerate(["Z", "Y", "X"])]
        assert [entry.name for entry in svc.top_n(rows, "produto", COLUMNS)] == ["Z", "Y", "X"]

    def test_limited_to_n(self, svc: KPIService) -> None:
        rows = [_row(i, produto=f"P{i}") for i in range(8)]
        assert len(svc.top_n(rows, "produto", COLUMNS)) == 5
        assert len(svc.top_n(rows, "produto", COLUMNS, n=3)) == 3

    def test_blank_values_count_as_not_available(self, svc: KPIService) -> None:
        rows = [_row(0, produto=""), _row(1, produto="A"), _row(2)]
        ranking = svc.top_n(rows, "produto", COLUMNS)
        assert [(entry.name, entry.count) for entry in ranking] == [("N/A", 2), ("A", 1)]

    def test_sources_are_normalized(self, svc: KPIService) -> None:
        rows = [_row(0, origem="fb_ads"), _row(1, origem="facebook"), _row(2, origem="")]
        ranking = svc.top_n(rows, "origem", COLUMNS)
        assert [(entry.name, entry.count) for entry in ranking] == [("facebook", 2), ("organic", 1)]

    def test_campaigns_are_normalized(self, svc: KPIService) -> None:
        rows = [_row(0, campanha="Promo|v1"), _row(1, campanha="Promo|v2")]
        assert svc.top_n(rows, "campanha", COLUMNS)[0].count == 2

    def test_unresolved_column(self, svc: KPIService) -> None:
        assert svc.top_n([_row(0, produto="A")], None, COLUMNS) == []


# ---------------------------------------------------------------------------
# Rollup
# ---------------------------------------------------------------------------


class TestRollup:
    def test_normal_rollup(self, svc: KPIService) -> None:
        rows = [_row(0, valor=600.0), _row(1, valor=400.0)]
        rollup = svc.rollup(rows, "valor", investment=500.0)
        assert rollup.revenue == pytest.approx(1000.0)
        assert rollup.tax == pytest.approx(60.0)
        assert rollup.investment == 500.0
        assert rollup.profit == pytest.approx(440.0)
        assert rollup.roas == pytest.approx(2.0)
        assert rollup.margin == pytest.approx(44.0)

    def test_tax_rate(self) -> None:
        assert TAX_RATE == 0.06

    def test_zero_investment_gives_zero_roas(self, svc: KPIService) -> None:
        rollup = svc.rollup([_row(0, valor=150.0)], "valor", investment=0.0)
        assert rollup.roas == 0.0
        assert rollup.profit == pytest.approx(141.0)

    def test_zero_revenue(self, svc: KPIService) -> None:
        rollup = svc.rollup([], "valor", investment=100.0)
        assert rollup.revenue == 0.0
        assert rollup.profit == pytest.approx(-100.0)
        assert rollup.roas == 0.0
        assert rollup.margin == 0.0

    def test_text_revenue_counts_as_zero(self, svc: KPIService) -> None:
        rows = [_row(0, valor="abc"), _row(1, valor=""), _row(2, valor=10.0), _row(3, valor="5")]
        assert svc.total_revenue(rows, "valor") == pytest.approx(15.0)

    def test_no_revenue_column(self, svc: KPIService) -> None:
        assert svc.rollup([_row(0, valor=10.0)], None, investment=0.0).revenue == 0.0

    def test_profit_identity(self, svc: KPIService) -> None:
        rows = [_row(i, valor=float(v)) for i, v in enumerate([12.5, 80.0, 3.3])]
        rollup = svc.rollup(rows, "valor", investment=42.0)
        assert rollup.profit == pytest.approx(rollup.revenue - rollup.investment - rollup.tax)


# ---------------------------------------------------------------------------
# Cluster performance
# ---------------------------------------------------------------------------


class TestClusterPerformance:
    def test_profit_status(self, svc: KPIService) -> None:
        performance = svc.cluster_performance(_cluster(), investment=100.0)
        assert performance.cpa == pytest.approx(50.0)
        assert performance.roi == pytest.approx(3.0)
        assert performance.status == ClusterStatus.PROFIT

    def test_loss_status(self, svc: KPIService) -> None:
        performance = svc.cluster_performance(_cluster(revenue=50.0), investment=100.0)
        assert performance.status == ClusterStatus.LOSS

    def test_break_even_is_loss(self, svc: KPIService) -> None:
        performance = svc.cluster_performance(_cluster(revenue=100.0), investment=100.0)
        assert performance.status == ClusterStatus.LOSS

    def test_no_investment_is_pending(self, svc: KPIService) -> None:
        performance = svc.cluster_performance(_cluster(), investment=0.0)
        assert performance.roi is None
        assert performance.cpa == 0.0
        assert performance.status == ClusterStatus.PENDING

    def test_zero_sales_gives_zero_cpa(self, svc: KPIService) -> None:
        performance = svc.cluster_performance(_cluster(sales_count=0), investment=100.0)
        assert performance.cpa == 0.0


# ---------------------------------------------------------------------------
# Period counters
# ---------------------------------------------------------------------------


class TestPeriodStats:
    def test_counters(self, svc: KPIService) -> None:
        rows = [
            _row(0, data="10/01/2024 08:00"),
            _row(1, data="05/01/2024"),
            _row(2, data="20/12/2023"),
            _row(3, data="01/11/2023"),
            _row(4, data="not a date"),
        ]
        stats = svc.period_stats(rows, "data", now=NOW)
        assert stats.today == 1
        assert stats.last_7_days == 2
        assert stats.last_30_days == 3

    def test_without_date_column(self, svc: KPIService) -> None:
        stats = svc.period_stats([_row(0, data="10/01/2024")], None, now=NOW)
        assert (stats.today, stats.last_7_days, stats.last_30_days) == (0, 0, 0)


# ---------------------------------------------------------------------------
# Statelessness
# ---------------------------------------------------------------------------


class TestStatelessness:
    def test_repeated_calls_match(self, svc: KPIService) -> None:
        rows = [_row(0, valor=100.0, produto="A"), _row(1, valor=50.0, produto="B")]
        assert svc.rollup(rows, "valor", 10.0) == svc.rollup(rows, "valor", 10.0)
        assert svc.top_n(rows, "produto", COLUMNS) == svc.top_n(rows, "produto", COLUMNS)
