"""
app/connectors/sheet_connector.py

Downloads a published spreadsheet as CSV text.

Spreadsheet links copied from the browser usually point at the editor
(``.../d/<id>/edit#gid=0``). Those are rewritten to the CSV export endpoint
before fetching. Every failure (network, HTTP status, HTML instead of CSV)
surfaces as one :class:`SheetFetchError` with the same operator-facing
message.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

import requests

from app.config import SheetFetchSettings, get_sheet_fetch_settings
from app.connectors.base import BaseConnector, ConnectorRequestError
from app.logging_utils import log_event

logger = logging.getLogger(__name__)

SHEET_FETCH_FAILURE_MESSAGE = (
    "Could not load the spreadsheet link. Make sure the sheet is published "
    "to the web as CSV."
)

_EDIT_SEGMENT_PATTERN = re.compile(r"/edit.*$")
_CSV_EXPORT_SEGMENT = "/export?format=csv"


class SheetFetchError(RuntimeError):
    """
    Raised when a spreadsheet URL cannot be turned into CSV text.
    """

    def __init__(self, message: str = SHEET_FETCH_FAILURE_MESSAGE) -> None:
        super().__init__(message)
        self.message = message


def to_csv_export_url(url: str) -> str:
    """
    Rewrite an editor link to its CSV export form; other URLs pass through.
    """

    if "/edit" not in url:
        return url
    return _EDIT_SEGMENT_PATTERN.sub(_CSV_EXPORT_SEGMENT, url, count=1)


class SheetConnector(BaseConnector):
    """
    Fetches CSV text for a published spreadsheet URL.
    """

    def __init__(
        self,
        *,
        http_settings: SheetFetchSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="published_sheet", http_settings=http_settings, session=session)

    def fetch_csv(self, url: str) -> str:
        target_url = to_csv_export_url(url.strip())
        try:
            response = self._get(target_url, headers={"Accept": "text/csv"})
        except (ConnectorRequestError, requests.RequestException) as exc:
            raise SheetFetchError() from exc

        content_type = (response.headers.get("Content-Type") or "").lower()
        if "html" in content_type:
            logger.error(
                "Sheet fetch returned HTML instead of CSV url=%s content_type=%s",
                target_url,
                content_type,
            )
            raise SheetFetchError()

        text = response.text
        log_event(
            logger,
            logging.INFO,
            "sheet_fetched",
            url=target_url,
            rewritten=target_url != url.strip(),
            characters=len(text),
        )
        return text


@lru_cache(maxsize=1)
def get_sheet_connector() -> SheetConnector:
    """
    Build and cache the spreadsheet connector with env-driven settings.
    """

    return SheetConnector(http_settings=get_sheet_fetch_settings())
