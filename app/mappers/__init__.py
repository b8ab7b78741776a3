"""
app/mappers package marker.
"""

from app.mappers.column_resolver import (
    ColumnMappingError,
    ColumnMappingErrorDetail,
    ColumnResolver,
    ResolvedColumns,
)
from app.mappers.utm_normalizer import clean_campaign, clean_source, dimension_value

__all__ = [
    "ColumnMappingError",
    "ColumnMappingErrorDetail",
    "ColumnResolver",
    "ResolvedColumns",
    "clean_campaign",
    "clean_source",
    "dimension_value",
]
