"""
app/api/dependencies.py

Request-level FastAPI dependencies.
"""

from __future__ import annotations

from fastapi import File, Form, HTTPException, UploadFile, status
from pydantic import TypeAdapter, ValidationError

# Spreadsheet tools and browsers label CSV downloads inconsistently.
CSV_CONTENT_TYPES = frozenset(
    {
        "text/csv",
        "application/csv",
        "text/plain",
        "application/vnd.ms-excel",
    }
)
CSV_EXTENSIONS = (".csv", ".txt")


def is_csv_upload(filename: str | None, content_type: str | None) -> bool:
    name = (filename or "").strip().lower()
    media_type = (content_type or "").split(";")[0].strip().lower()
    return name.endswith(CSV_EXTENSIONS) or media_type in CSV_CONTENT_TYPES


def require_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Accept the upload only when its name or media type says CSV.

    Raises HTTP 400 otherwise; the content itself is checked later by
    ingestion.
    """

    if not is_csv_upload(file.filename, file.content_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are accepted.",
        )
    return file


_OVERRIDES_ADAPTER = TypeAdapter(dict[str, str])


def parse_column_overrides(column_overrides: str | None = Form(None)) -> dict[str, str] | None:
    """
    Decode the optional ``column_overrides`` form field of an upload.

    The field carries a JSON object mapping dashboard fields to CSV headers.
    Absent or blank means "no explicit overrides".
    """

    if column_overrides is None or not column_overrides.strip():
        return None
    try:
        return _OVERRIDES_ADAPTER.validate_json(column_overrides)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="column_overrides must be a JSON object of field to header.",
        ) from exc
