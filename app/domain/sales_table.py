"""
app/domain/sales_table.py

Typed in-memory sales table produced by CSV ingestion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Union

Scalar = Union[float, str]
"""One parsed cell: a number or a cleaned string."""


class ColumnType:
    NUMERIC = "numeric"
    TEXTUAL = "textual"


@dataclass(frozen=True)
class Row:
    """
    One ingested data row.

    ``row_id`` is the zero-based ingestion position and never changes.
    """

    row_id: int
    values: Mapping[str, Scalar]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, column: str | None, default: Scalar | None = None) -> Scalar | None:
        if column is None:
            return default
        return self.values.get(column, default)

    def __getitem__(self, column: str) -> Scalar:
        return self.values[column]


@dataclass(frozen=True)
class Table:
    """
    Immutable typed table: ordered headers, ordered rows, one type per column.
    """

    headers: tuple[str, ...]
    rows: tuple[Row, ...]
    types: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple(self.headers))
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "types", MappingProxyType(dict(self.types)))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    @property
    def numeric_columns(self) -> tuple[str, ...]:
        return tuple(h for h in self.headers if self.types.get(h) == ColumnType.NUMERIC)


@dataclass(frozen=True)
class IngestionSummary:
    """
    End-of-run ingestion summary.
    """

    source: str
    rows_loaded: int
    headers: tuple[str, ...]
    types: Mapping[str, str]
