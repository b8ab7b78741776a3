"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.sheet_connector import (
    SheetConnector,
    SheetFetchError,
    get_sheet_connector,
    to_csv_export_url,
)

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "SheetConnector",
    "SheetFetchError",
    "get_sheet_connector",
    "to_csv_export_url",
]
