"""
app/services/aggregation_service.py

Grouping layer for dashboard views.

Partitions filtered rows into clusters keyed by normalized UTM source and
normalized campaign::

    key = clean_source(source) + "|" + clean_campaign(campaign)

Each cluster accumulates sale count, revenue, earliest/latest date label,
per-product sale counts and the distinct content values seen. Clusters are
rebuilt from scratch on every call; ordering is by descending sale count,
ties keeping first-seen order.

A literal ``|`` inside a raw source value can collide with the key
separator. That is accepted rather than guarded.

No arithmetic beyond accumulation lives here. Spend, CPA and ROI belong to
KPIService.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

from app.domain.performance import Cluster, DailyCount
from app.domain.sales_table import Row
from app.mappers.column_resolver import ResolvedColumns
from app.mappers.utm_normalizer import (
    CAMPAIGN_SEPARATOR,
    MISSING_VALUE,
    clean_campaign,
    clean_source,
)
from app.validators.date_parser import date_label, parse_date
from app.validators.scalar_parser import coerce_number, format_scalar

logger = logging.getLogger(__name__)


def cluster_key(source: str, campaign: str) -> str:
    return f"{source}{CAMPAIGN_SEPARATOR}{campaign}"


@dataclass
class _ClusterAccumulator:
    key: str
    source: str
    campaign: str
    min_date: str
    max_date: str
    sales_count: int = 0
    revenue: float = 0.0
    products: dict[str, int] = field(default_factory=dict)
    contents: dict[str, None] = field(default_factory=dict)

    def add(self, *, revenue: float, product: str, content: str, row_date: str) -> None:
        self.sales_count += 1
        self.revenue += revenue
        self.products[product] = self.products.get(product, 0) + 1
        self.contents.setdefault(content, None)

        current = parse_date(row_date)
        if current is None:
            return
        earliest = parse_date(self.min_date)
        latest = parse_date(self.max_date)
        if earliest is not None and current < earliest:
            self.min_date = row_date
        if latest is not None and current > latest:
            self.max_date = row_date

    def freeze(self) -> Cluster:
        return Cluster(
            key=self.key,
            source=self.source,
            campaign=self.campaign,
            sales_count=self.sales_count,
            revenue=self.revenue,
            min_date=self.min_date,
            max_date=self.max_date,
            products=self.products,
            contents=tuple(self.contents),
        )


class AggregationService:
    """
    Builds clusters and daily counts from an already filtered row set.

    All methods are pure: they read rows and return new values.
    """

    def group_clusters(self, rows: Sequence[Row], columns: ResolvedColumns) -> list[Cluster]:
        groups: dict[str, _ClusterAccumulator] = {}

        for row in rows:
            source = clean_source(format_scalar(row.get(columns.source, "")))
            campaign = clean_campaign(format_scalar(row.get(columns.campaign, "")))
            key = cluster_key(source, campaign)
            row_date = date_label(row.get(columns.date)) if columns.date else ""

            accumulator = groups.get(key)
            if accumulator is None:
                accumulator = _ClusterAccumulator(
                    key=key,
                    source=source,
                    campaign=campaign,
                    min_date=row_date,
                    max_date=row_date,
                )
                groups[key] = accumulator

            accumulator.add(
                revenue=coerce_number(row.get(columns.revenue)),
                product=self._label(row, columns.product),
                content=self._label(row, columns.content),
                row_date=row_date,
            )

        clusters = sorted(
            (accumulator.freeze() for accumulator in groups.values()),
            key=lambda cluster: cluster.sales_count,
            reverse=True,
        )
        logger.debug("group_clusters %d rows -> %d clusters", len(rows), len(clusters))
        return clusters

    def daily_evolution(self, rows: Sequence[Row], date_column: str | None) -> list[DailyCount]:
        """
        Sale count per date label, oldest first.

        Labels that do not parse as dates sort before every real date.
        """

        if date_column is None:
            return []

        daily: dict[str, int] = {}
        for row in rows:
            label = date_label(row.get(date_column))
            daily[label] = daily.get(label, 0) + 1

        return sorted(
            (DailyCount(date=label, count=count) for label, count in daily.items()),
            key=lambda entry: parse_date(entry.date) or datetime.min,
        )

    @staticmethod
    def _label(row: Row, column: str | None) -> str:
        return format_scalar(row.get(column)) or MISSING_VALUE
