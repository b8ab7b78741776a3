"""
app/schemas/csv_ingestion.py

Request and response schemas for dataset ingestion endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.sales_table import IngestionSummary


class SheetLoadRequest(BaseModel):
    """
    Request body for loading a published spreadsheet.
    """

    url: str = Field(..., min_length=1)
    column_overrides: dict[str, str] | None = None


class IngestionSummaryResponse(BaseModel):
    """
    API response model for one ingestion.

    ``table_loaded`` is false when the input held no data; the previously
    loaded table, if any, is left untouched.
    """

    table_loaded: bool
    source: str | None = None
    rows_loaded: int = Field(default=0, ge=0)
    headers: list[str] = Field(default_factory=list)
    types: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_summary(cls, summary: IngestionSummary | None) -> "IngestionSummaryResponse":
        if summary is None:
            return cls(table_loaded=False)
        return cls(
            table_loaded=True,
            source=summary.source,
            rows_loaded=summary.rows_loaded,
            headers=list(summary.headers),
            types=dict(summary.types),
        )


class DatasetResponse(BaseModel):
    """
    Shape of the loaded table and the columns resolved for it.
    """

    headers: list[str]
    types: dict[str, str]
    row_count: int = Field(..., ge=0)
    columns: dict[str, str | None]
