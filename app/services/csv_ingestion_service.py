"""
app/services/csv_ingestion_service.py

Service layer for CSV ingestion: raw delimited text in, typed table out.

Parsing rules
-------------
- Lines split on CRLF or LF; blank lines are dropped.
- The first line holds the headers: split on every comma, trimmed, with one
  layer of surrounding quotes removed.
- Data lines split on commas outside double-quoted sections. Each field is
  trimmed and parsed by :func:`parse_scalar`. Short rows are padded with
  empty strings; surplus fields are ignored.
- Column types are inferred once all rows are parsed: a column is numeric
  when the first row holding a non-empty value for it parsed to a number.

Unbalanced quotes are not repaired; the split works on the literal text.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from fastapi import UploadFile

from app.config import get_csv_ingestion_settings
from app.domain.sales_table import ColumnType, IngestionSummary, Row, Scalar, Table
from app.logging_utils import log_event
from app.validators.scalar_parser import parse_scalar, strip_quotes

logger = logging.getLogger(__name__)

_LINE_BREAK_PATTERN = re.compile(r"\r?\n")
# A comma separates fields only when an even number of quotes follows it.
_FIELD_SEPARATOR_PATTERN = re.compile(r',(?=(?:(?:[^"]*"){2})*[^"]*$)')


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CSVIngestionError(ValueError):
    """
    Raised when an upload cannot be turned into CSV text.
    """


class CSVDecodeError(CSVIngestionError):
    """
    Raised when uploaded bytes are not valid text in the configured encoding.
    """


class CSVUploadTooLargeError(CSVIngestionError):
    """
    Raised when an upload exceeds the configured size limit.
    """


# ---------------------------------------------------------------------------
# Table building
# ---------------------------------------------------------------------------


def split_header_line(line: str) -> list[str]:
    return [strip_quotes(header.strip()) for header in line.split(",")]


def split_data_line(line: str) -> list[str]:
    return [value.strip() for value in _FIELD_SEPARATOR_PATTERN.split(line)]


def infer_column_type(rows: list[Row], header: str) -> str:
    """
    Type of the first row holding a non-empty value for ``header``.
    """

    for row in rows:
        value = row.get(header)
        if value is None or value == "":
            continue
        return ColumnType.NUMERIC if isinstance(value, float) else ColumnType.TEXTUAL
    return ColumnType.TEXTUAL


def build_table(csv_text: str) -> Table | None:
    """
    Parse raw CSV text into a typed :class:`Table`.

    Returns ``None`` when the text holds no non-blank line.
    """

    lines = [line for line in _LINE_BREAK_PATTERN.split(csv_text) if line.strip() != ""]
    if not lines:
        return None

    headers = split_header_line(lines[0])

    rows: list[Row] = []
    for row_id, line in enumerate(lines[1:]):
        fields = split_data_line(line)
        values: dict[str, Scalar] = {}
        for index, header in enumerate(headers):
            values[header] = parse_scalar(fields[index] if index < len(fields) else "")
        rows.append(Row(row_id=row_id, values=values))

    types = {header: infer_column_type(rows, header) for header in headers}
    return Table(headers=tuple(headers), rows=tuple(rows), types=types)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class CSVIngestionService:
    """
    Turns uploaded files or fetched text into typed tables.
    """

    def __init__(self, *, encoding: str, max_upload_bytes: int) -> None:
        self._encoding = encoding
        self._max_upload_bytes = max(1, max_upload_bytes)

    def ingest_text(self, csv_text: str, *, source: str) -> tuple[Table, IngestionSummary] | None:
        """
        Build a table from CSV text.

        Returns ``None`` when no table could be produced; callers treat that
        as a no-op and keep whatever table they already hold.
        """

        table = build_table(csv_text)
        if table is None:
            log_event(logger, logging.INFO, "csv_ingestion_empty", source=source)
            return None

        summary = IngestionSummary(
            source=source,
            rows_loaded=len(table.rows),
            headers=table.headers,
            types=dict(table.types),
        )
        log_event(
            logger,
            logging.INFO,
            "csv_ingested",
            source=source,
            rows=summary.rows_loaded,
            columns=len(table.headers),
            numeric_columns=len(table.numeric_columns),
        )
        return table, summary

    def ingest_upload(self, upload_file: UploadFile) -> tuple[Table, IngestionSummary] | None:
        """
        Read an uploaded CSV file and build a table from its text.
        """

        return self.ingest_text(self.read_upload(upload_file), source=upload_file.filename or "upload")

    def read_upload(self, upload_file: UploadFile) -> str:
        raw_file = upload_file.file
        raw_file.seek(0)
        payload = raw_file.read(self._max_upload_bytes + 1)
        if len(payload) > self._max_upload_bytes:
            raise CSVUploadTooLargeError(
                f"CSV upload exceeds the {self._max_upload_bytes} byte limit."
            )
        try:
            return payload.decode(self._encoding)
        except UnicodeDecodeError as exc:
            raise CSVDecodeError(f"CSV could not be decoded as {self._encoding}.") from exc


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """

    settings = get_csv_ingestion_settings()
    return CSVIngestionService(
        encoding=settings.encoding,
        max_upload_bytes=settings.max_upload_bytes,
    )
