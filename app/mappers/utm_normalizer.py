"""
app/mappers/utm_normalizer.py

Normalization rules for UTM source and campaign values.

The same rules apply wherever source/campaign values are compared, offered
as filter options, ranked or grouped, so that ``fb_ads`` and
``facebook.com`` land in the same bucket.
"""

from __future__ import annotations

from app.domain.sales_table import Scalar
from app.mappers.column_resolver import ResolvedColumns
from app.validators.scalar_parser import format_scalar

ORGANIC_SOURCE = "organic"
MISSING_CAMPAIGN = "n/a"
MISSING_VALUE = "N/A"
CAMPAIGN_SEPARATOR = "|"

# Checked in order; the first platform with a matching marker wins.
SOURCE_VOCABULARY: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("tiktok", ("tiktok",)),
    ("facebook", ("facebook", "fb")),
    ("instagram", ("instagram", "ig")),
    ("google", ("google",)),
    ("kwai", ("kwai",)),
)


def clean_source(value: str) -> str:
    if not value:
        return ORGANIC_SOURCE
    lowered = value.lower()
    for platform, markers in SOURCE_VOCABULARY:
        if any(marker in lowered for marker in markers):
            return platform
    return value


def clean_campaign(value: str) -> str:
    if not value:
        return MISSING_CAMPAIGN
    return value.split(CAMPAIGN_SEPARATOR)[0].strip()


def dimension_value(
    value: Scalar | None,
    column: str | None,
    columns: ResolvedColumns,
    *,
    empty: str = "",
) -> str:
    """
    Comparable string for one cell of ``column``.

    Source and campaign columns go through their cleaning rules; other
    columns keep their string form, with ``empty`` standing in for blanks.
    A cell absent from the row reads as ``N/A``.
    """

    text = MISSING_VALUE if value is None else format_scalar(value)
    if column is not None and column == columns.source:
        return clean_source(text)
    if column is not None and column == columns.campaign:
        return clean_campaign(text)
    return text if text != "" else empty
