"""
app/domain/query.py

Immutable query snapshot consumed by every dashboard computation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Iterable, Mapping


class DatePreset:
    ALL = "all"
    TODAY = "today"
    LAST_7_DAYS = "last_7_days"
    LAST_15_DAYS = "last_15_days"
    LAST_30_DAYS = "last_30_days"
    CUSTOM = "custom"


DATE_PRESETS: tuple[str, ...] = (
    DatePreset.ALL,
    DatePreset.TODAY,
    DatePreset.LAST_7_DAYS,
    DatePreset.LAST_15_DAYS,
    DatePreset.LAST_30_DAYS,
    DatePreset.CUSTOM,
)

LOOKBACK_DAYS_BY_PRESET: dict[str, int] = {
    DatePreset.LAST_7_DAYS: 7,
    DatePreset.LAST_15_DAYS: 15,
    DatePreset.LAST_30_DAYS: 30,
}


@dataclass(frozen=True)
class FilterState:
    """
    Column -> accepted values. A missing column or an empty set means the
    column is unrestricted; values inside one column are OR-ed.
    """

    selections: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "selections",
            MappingProxyType({column: frozenset(values) for column, values in self.selections.items()}),
        )

    @classmethod
    def from_lists(cls, selections: Mapping[str, Iterable[str]] | None) -> "FilterState":
        if not selections:
            return cls()
        return cls({column: frozenset(str(v) for v in values) for column, values in selections.items()})

    def accepted(self, column: str) -> frozenset[str]:
        return self.selections.get(column, frozenset())

    def active(self) -> dict[str, frozenset[str]]:
        """
        Only the columns that actually restrict rows.
        """

        return {column: values for column, values in self.selections.items() if values}

    def toggle(self, column: str, value: str) -> "FilterState":
        """
        Return a new state with ``value`` added to or removed from ``column``.
        """

        current = self.accepted(column)
        updated = current - {value} if value in current else current | {value}
        selections = dict(self.selections)
        selections[column] = updated
        return FilterState(selections)

    def cleared(self) -> "FilterState":
        return FilterState()


@dataclass(frozen=True)
class QueryParameters:
    """
    Snapshot of operator inputs: filters, free-text search and date window.
    """

    filters: FilterState = field(default_factory=FilterState)
    search_term: str = ""
    date_preset: str = DatePreset.ALL
    custom_start: date | None = None
    custom_end: date | None = None

    def __post_init__(self) -> None:
        if self.date_preset not in DATE_PRESETS:
            raise ValueError(
                f"Unknown date preset '{self.date_preset}'. Allowed values: {list(DATE_PRESETS)}."
            )


@dataclass(frozen=True)
class InvestmentInputs:
    """
    Operator-entered spend: one manual total plus per-cluster amounts.
    """

    manual_total: float = 0.0
    per_cluster: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "per_cluster", MappingProxyType(dict(self.per_cluster)))

    def for_cluster(self, key: str) -> float:
        return self.per_cluster.get(key, 0.0)
