"""
app/validators package marker.
"""

from app.validators.date_parser import date_label, parse_date
from app.validators.scalar_parser import coerce_number, format_scalar, parse_scalar, to_number

__all__ = [
    "coerce_number",
    "date_label",
    "format_scalar",
    "parse_date",
    "parse_scalar",
    "to_number",
]
