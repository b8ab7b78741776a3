"""
app/services/dashboard_service.py

In-memory dashboard state and view computation.

The service holds exactly one loaded table, the columns resolved for it,
and the operator's spend inputs. Every view is recomputed in full from an
immutable :class:`QueryParameters` snapshot by
:func:`compute_dashboard_view`, which is a pure function of its arguments.

Lifecycle
---------
- A successful ingestion replaces the table and re-resolves columns.
  Stored column overrides carry over only while their headers still exist.
  Per-cluster spend is kept for clusters that still have rows; the manual
  total is kept as is.
- An ingestion that yields no table is a no-op.
- ``reset()`` drops the table, the resolved columns and all spend inputs.

Overlapping ingestions are not serialized; the last one to finish wins.
"""

from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import Mapping

from fastapi import UploadFile

from app.config import COLUMN_FIELDS, get_column_resolution_settings, get_dashboard_settings
from app.connectors.sheet_connector import SheetConnector, get_sheet_connector
from app.domain.performance import DashboardView
from app.domain.query import InvestmentInputs, QueryParameters
from app.domain.sales_table import IngestionSummary, Table
from app.logging_utils import timed_event
from app.mappers.column_resolver import ColumnResolver, ResolvedColumns
from app.services.aggregation_service import AggregationService
from app.services.csv_ingestion_service import CSVIngestionService, get_csv_ingestion_service
from app.services.filter_service import FilterService
from app.services.insight_service import InsightService
from app.services.kpi_service import DEFAULT_TOP_N, KPIService

logger = logging.getLogger(__name__)


class DatasetNotLoadedError(RuntimeError):
    """
    Raised when a view is requested before any table was loaded.
    """


# ---------------------------------------------------------------------------
# Pure view computation
# ---------------------------------------------------------------------------


def compute_dashboard_view(
    table: Table,
    columns: ResolvedColumns,
    params: QueryParameters,
    investments: InvestmentInputs,
    *,
    now: datetime | None = None,
    top_n: int = DEFAULT_TOP_N,
    filter_service: FilterService | None = None,
    aggregation_service: AggregationService | None = None,
    kpi_service: KPIService | None = None,
) -> DashboardView:
    """
    Compute every derived view for one snapshot of operator inputs.
    """

    filters = filter_service or FilterService()
    aggregation = aggregation_service or AggregationService()
    kpi = kpi_service or KPIService()
    current = now or datetime.now()

    rows = filters.filter_rows(table, columns, params, now=current)
    clusters = tuple(
        kpi.cluster_performance(cluster, investments.for_cluster(cluster.key))
        for cluster in aggregation.group_clusters(rows, columns)
    )
    grouped_investment = sum(performance.investment for performance in clusters)

    return DashboardView(
        rows=rows,
        clusters=clusters,
        top_campaigns=tuple(kpi.top_n(rows, columns.campaign, columns, top_n)),
        top_sources=tuple(kpi.top_n(rows, columns.source, columns, top_n)),
        top_products=tuple(kpi.top_n(rows, columns.product, columns, top_n)),
        rollup=kpi.rollup(rows, columns.revenue, investments.manual_total),
        cluster_rollup=kpi.rollup(rows, columns.revenue, grouped_investment),
        period_stats=kpi.period_stats(table.rows, columns.date, now=current),
        evolution=tuple(aggregation.daily_evolution(rows, columns.date)),
        filter_options=filters.filter_options(table, columns),
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class DashboardService:
    """
    Owns the loaded table and spend inputs for a single operator.
    """

    def __init__(
        self,
        *,
        ingestion_service: CSVIngestionService,
        column_resolver: ColumnResolver | None = None,
        sheet_connector: SheetConnector | None = None,
        top_n: int = DEFAULT_TOP_N,
    ) -> None:
        self._ingestion = ingestion_service
        self._resolver = column_resolver or ColumnResolver()
        self._sheet_connector = sheet_connector
        self._top_n = max(1, top_n)
        self._filter_service = FilterService()
        self._aggregation_service = AggregationService()
        self._kpi_service = KPIService()

        self._table: Table | None = None
        self._columns: ResolvedColumns | None = None
        self._column_overrides: dict[str, str] = {}
        self._manual_investment = 0.0
        self._cluster_investments: dict[str, float] = {}

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def table(self) -> Table | None:
        return self._table

    @property
    def columns(self) -> ResolvedColumns | None:
        return self._columns

    @property
    def investments(self) -> InvestmentInputs:
        return InvestmentInputs(
            manual_total=self._manual_investment,
            per_cluster=self._cluster_investments,
        )

    def require_table(self) -> tuple[Table, ResolvedColumns]:
        if self._table is None or self._columns is None:
            raise DatasetNotLoadedError("No dataset loaded. Upload a CSV or connect a sheet first.")
        return self._table, self._columns

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def load_text(
        self,
        csv_text: str,
        *,
        source: str,
        column_overrides: Mapping[str, str] | None = None,
    ) -> IngestionSummary | None:
        """
        Replace the loaded table with one built from ``csv_text``.

        Returns ``None`` and keeps the current table when nothing was parsed.
        Raises ColumnMappingError when ``column_overrides`` do not fit the
        new headers; the current table is kept in that case too. Without
        ``column_overrides`` the previous load's overrides are reused where
        their headers are still present.
        """

        result = self._ingestion.ingest_text(csv_text, source=source)
        return self._install(result, column_overrides)

    def load_upload(
        self,
        upload_file: UploadFile,
        *,
        column_overrides: Mapping[str, str] | None = None,
    ) -> IngestionSummary | None:
        result = self._ingestion.ingest_upload(upload_file)
        return self._install(result, column_overrides)

    def load_sheet(
        self,
        url: str,
        *,
        column_overrides: Mapping[str, str] | None = None,
    ) -> IngestionSummary | None:
        """
        Fetch a published spreadsheet and load it.

        Raises SheetFetchError on any download failure.
        """

        connector = self._sheet_connector or get_sheet_connector()
        csv_text = connector.fetch_csv(url)
        return self.load_text(csv_text, source=url, column_overrides=column_overrides)

    def reset(self) -> None:
        self._table = None
        self._columns = None
        self._column_overrides = {}
        self._manual_investment = 0.0
        self._cluster_investments = {}
        logger.info("Dashboard dataset reset")

    def _install(
        self,
        result: tuple[Table, IngestionSummary] | None,
        column_overrides: Mapping[str, str] | None,
    ) -> IngestionSummary | None:
        if result is None:
            return None
        table, summary = result
        if column_overrides is not None:
            overrides = dict(column_overrides)
        else:
            overrides = self._carried_overrides(table.headers)
        columns = self._resolver.resolve(table.headers, overrides=overrides)

        self._table = table
        self._columns = columns
        self._column_overrides = overrides
        self._cluster_investments = self._live_cluster_investments(table, columns)
        logger.info(
            "Dashboard dataset loaded source=%s rows=%d columns=%s",
            summary.source,
            summary.rows_loaded,
            columns.as_dict(),
        )
        return summary

    def _carried_overrides(self, headers: tuple[str, ...]) -> dict[str, str]:
        kept: dict[str, str] = {}
        for field_name, header in self._column_overrides.items():
            if field_name.strip() in COLUMN_FIELDS and header.strip() in headers:
                kept[field_name] = header
            else:
                logger.warning(
                    "Dropping stale column override field=%s header=%s",
                    field_name,
                    header,
                )
        return kept

    def _live_cluster_investments(self, table: Table, columns: ResolvedColumns) -> dict[str, float]:
        live_keys = {cluster.key for cluster in self._aggregation_service.group_clusters(table.rows, columns)}
        kept = {key: amount for key, amount in self._cluster_investments.items() if key in live_keys}
        dropped = len(self._cluster_investments) - len(kept)
        if dropped:
            logger.info("Dropped spend for %d clusters absent from the new table", dropped)
        return kept

    # ------------------------------------------------------------------
    # Spend inputs
    # ------------------------------------------------------------------

    def set_manual_investment(self, amount: float) -> None:
        if amount < 0:
            raise ValueError("Investment must be zero or positive.")
        self._manual_investment = float(amount)

    def set_cluster_investment(self, cluster_key: str, amount: float) -> None:
        if amount < 0:
            raise ValueError("Investment must be zero or positive.")
        self._cluster_investments = {**self._cluster_investments, cluster_key: float(amount)}

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def query(self, params: QueryParameters, *, now: datetime | None = None) -> DashboardView:
        table, columns = self.require_table()
        with timed_event(logger, "dashboard_query", preset=params.date_preset) as fields:
            view = compute_dashboard_view(
                table,
                columns,
                params,
                self.investments,
                now=now,
                top_n=self._top_n,
                filter_service=self._filter_service,
                aggregation_service=self._aggregation_service,
                kpi_service=self._kpi_service,
            )
            fields.update(rows=view.row_count, clusters=len(view.clusters))
        return view

    def generate_insight(self, insight_service: InsightService) -> str:
        table, _ = self.require_table()
        return insight_service.generate(table)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_dashboard_service() -> DashboardService:
    """
    Build and cache the process-wide dashboard service.
    """

    return DashboardService(
        ingestion_service=get_csv_ingestion_service(),
        column_resolver=ColumnResolver(specs=get_column_resolution_settings().specs),
        top_n=get_dashboard_settings().top_n,
    )
