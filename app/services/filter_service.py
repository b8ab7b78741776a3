"""
app/services/filter_service.py

Row filtering for dashboard queries.

A row survives when it passes the date window, the categorical filters and
the search term. The date window applies only when a date column is resolved
and the preset is not ``all``; rows whose date does not parse are then
excluded. Each restricted column must accept the row's value. The search term
matches when some column's string form contains it, ignoring case.

Filtering never reorders or mutates rows.
"""

from __future__ import annotations

import logging
from datetime import datetime, time, timedelta

from app.domain.query import LOOKBACK_DAYS_BY_PRESET, DatePreset, FilterState, QueryParameters
from app.domain.sales_table import Row, Table
from app.mappers.column_resolver import ResolvedColumns
from app.mappers.utm_normalizer import dimension_value
from app.validators.date_parser import parse_date
from app.validators.scalar_parser import format_scalar

logger = logging.getLogger(__name__)


class FilterService:
    """
    Stateless filter engine over an immutable table.
    """

    def filter_rows(
        self,
        table: Table,
        columns: ResolvedColumns,
        params: QueryParameters,
        *,
        now: datetime | None = None,
    ) -> tuple[Row, ...]:
        current = now or datetime.now()
        active_filters = params.filters.active()
        term = params.search_term.lower()

        kept = tuple(
            row
            for row in table.rows
            if self._matches_date(row, columns.date, params, current)
            and self._matches_filters(row, active_filters, columns)
            and self._matches_search(row, table.headers, term)
        )
        logger.debug(
            "filter_rows preset=%s filters=%d search=%r -> %d/%d rows",
            params.date_preset,
            len(active_filters),
            params.search_term,
            len(kept),
            len(table.rows),
        )
        return kept

    def filter_options(self, table: Table, columns: ResolvedColumns) -> dict[str, tuple[str, ...]]:
        """
        Sorted distinct values offered for every categorical column.
        """

        options: dict[str, tuple[str, ...]] = {}
        for column in columns.categorical:
            values = {dimension_value(row.get(column), column, columns) for row in table.rows}
            values.discard("")
            options[column] = tuple(sorted(values))
        return options

    @staticmethod
    def toggle(filters: FilterState, column: str, value: str) -> FilterState:
        return filters.toggle(column, value)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    @staticmethod
    def _matches_date(
        row: Row,
        date_column: str | None,
        params: QueryParameters,
        now: datetime,
    ) -> bool:
        if date_column is None or params.date_preset == DatePreset.ALL:
            return True

        row_date = parse_date(row.get(date_column))
        if row_date is None:
            return False

        if params.date_preset == DatePreset.TODAY:
            return row_date.date() == now.date()

        lookback = LOOKBACK_DAYS_BY_PRESET.get(params.date_preset)
        if lookback is not None:
            return row_date >= now - timedelta(days=lookback)

        if params.date_preset == DatePreset.CUSTOM and params.custom_start and params.custom_end:
            start = datetime.combine(params.custom_start, time.min)
            end = datetime.combine(params.custom_end, time.max)
            return start <= row_date <= end

        return True

    @staticmethod
    def _matches_filters(
        row: Row,
        active_filters: dict[str, frozenset[str]],
        columns: ResolvedColumns,
    ) -> bool:
        return all(
            dimension_value(row.get(column), column, columns) in accepted
            for column, accepted in active_filters.items()
        )

    @staticmethod
    def _matches_search(row: Row, headers: tuple[str, ...], term: str) -> bool:
        if term == "":
            return True
        return any(term in format_scalar(row.get(header)).lower() for header in headers)
