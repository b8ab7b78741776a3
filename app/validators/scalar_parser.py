"""
app/validators/scalar_parser.py

Cell-level type parsing for CSV ingestion.

Brazilian exports format money as ``R$ 1.234,56`` and rates as ``12,5%``:
``.`` groups thousands and ``,`` marks decimals. Cells carrying a currency
or percent marker, or shaped like a decimal-comma number, are normalized to
a plain decimal literal before numeric conversion. Everything else goes to
numeric conversion untouched, so ``1234.5`` and ``42`` keep their meaning.
"""

from __future__ import annotations

import math
import re

from app.domain.sales_table import Scalar

CURRENCY_MARKER = "R$"
PERCENT_MARKER = "%"

_DECIMAL_COMMA_PATTERN = re.compile(r"^-?[\d.]+,\d+$")
_NUMERIC_LITERAL_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_WHITESPACE_PATTERN = re.compile(r"\s")


def strip_quotes(value: str) -> str:
    """
    Remove one leading and one trailing double quote, independently.
    """

    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def to_number(text: str) -> float | None:
    """
    Convert a decimal literal to a finite float; ``None`` when it is not one.
    """

    candidate = text.strip()
    if not _NUMERIC_LITERAL_PATTERN.match(candidate):
        return None
    number = float(candidate)
    if not math.isfinite(number):
        return None
    return number


def normalize_locale_number(cleaned: str) -> str:
    """
    Rewrite a Brazilian-formatted number into a plain decimal literal.
    """

    if not (
        CURRENCY_MARKER in cleaned
        or PERCENT_MARKER in cleaned
        or _DECIMAL_COMMA_PATTERN.match(cleaned)
    ):
        return cleaned

    cleaned = cleaned.replace(CURRENCY_MARKER, "", 1).replace(PERCENT_MARKER, "", 1)
    cleaned = _WHITESPACE_PATTERN.sub("", cleaned)

    if "," in cleaned and "." in cleaned:
        cleaned = cleaned.replace(".", "").replace(",", ".", 1)
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".", 1)
    return cleaned


def parse_scalar(raw: str | None) -> Scalar:
    """
    Parse one raw CSV token into a number or a cleaned string.

    Never raises: anything that is not numeric comes back as the cleaned
    text (quotes and outer whitespace removed, locale markers stripped when
    they were present).
    """

    if raw is None or raw.strip() == "":
        return ""

    cleaned = normalize_locale_number(strip_quotes(raw.strip()))
    if cleaned == "":
        return cleaned

    number = to_number(cleaned)
    return number if number is not None else cleaned


def coerce_number(value: Scalar | None) -> float:
    """
    Aggregation coercion: numbers pass through, numeric text converts,
    everything else counts as ``0.0``.
    """

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        number = to_number(value)
        return number if number is not None else 0.0
    return 0.0


def format_scalar(value: Scalar | None) -> str:
    """
    String form of a cell used for comparisons, search and labels.

    Integral numbers render without a fractional part (``42.0`` -> ``"42"``).
    """

    if value is None:
        return ""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)
