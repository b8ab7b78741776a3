"""
app/validators/date_parser.py

Day/month/year date parsing with an ISO-8601 fallback.
"""

from __future__ import annotations

from datetime import datetime

from app.domain.sales_table import Scalar
from app.validators.scalar_parser import format_scalar


def parse_date(value: object) -> datetime | None:
    """
    Parse ``dd/mm/yyyy`` (optionally followed by a time) into a local datetime.

    Only strings are eligible. Anything that is not three ``/``-separated
    integers is tried as ISO-8601 on the full value. Returns ``None`` when
    neither form applies or the calendar date does not exist.
    """

    if not isinstance(value, str) or not value:
        return None

    parts = value.split(" ")[0].split("/")
    if len(parts) == 3:
        if not all(part.isdecimal() for part in parts):
            return None
        try:
            day, month, year = (int(part) for part in parts)
            return datetime(year, month, day)
        except ValueError:
            return None

    return _parse_iso(value.strip())


def _parse_iso(value: str) -> datetime | None:
    normalized = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        return parsed.astimezone().replace(tzinfo=None)
    return parsed


def date_label(value: Scalar | None) -> str:
    """
    Date part of a cell: its string form up to the first space.
    """

    return format_scalar(value).split(" ")[0]
