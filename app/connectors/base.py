"""
app/connectors/base.py

Shared HTTP plumbing for connectors that download raw text.

Timeouts, connection errors and the status codes in
``RETRYABLE_STATUS_CODES`` are retried up to ``max_retries`` times with
exponential backoff. Any other HTTP error status fails on the first attempt.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import Iterator

import requests

from app.config import SheetFetchSettings

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class ConnectorRequestError(RuntimeError):
    """
    Raised when a download fails for good.

    ``status_code`` is set when the failure was an HTTP error response.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BaseConnector(ABC):
    """
    A named text source reachable over HTTP.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        http_settings: SheetFetchSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._settings = http_settings
        self._session = session or requests.Session()

    @abstractmethod
    def fetch_csv(self, url: str) -> str:
        """
        Fetch CSV text from ``url``.
        """

    def _backoff_delays(self) -> Iterator[float]:
        delay = self._settings.backoff_initial_seconds
        for _ in range(max(0, self._settings.max_retries)):
            yield delay
            delay *= self._settings.backoff_multiplier

    def _get(self, url: str, *, headers: dict[str, str] | None = None) -> requests.Response:
        delays = [*self._backoff_delays(), None]
        last_error: Exception | None = None

        for attempt, delay in enumerate(delays, start=1):
            try:
                response = self._session.get(url, headers=headers, timeout=self._settings.timeout_seconds)
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
            else:
                if response.status_code not in RETRYABLE_STATUS_CODES:
                    self._raise_for_status(response, url)
                    return response
                last_error = requests.HTTPError(
                    f"Retryable HTTP status code: {response.status_code}",
                    response=response,
                )

            if delay is None:
                break
            logger.warning(
                "Connector retry source=%s attempt=%d/%d wait_seconds=%.2f url=%s error=%s",
                self.source,
                attempt,
                len(delays),
                delay,
                url,
                last_error,
            )
            time.sleep(delay)

        logger.error(
            "Connector gave up source=%s attempts=%d url=%s error=%s",
            self.source,
            len(delays),
            url,
            last_error,
        )
        raise ConnectorRequestError(f"{self.source}: request failed.") from last_error

    def _raise_for_status(self, response: requests.Response, url: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            logger.error(
                "Connector request rejected source=%s status=%s url=%s",
                self.source,
                response.status_code,
                url,
            )
            raise ConnectorRequestError(
                f"{self.source}: HTTP {response.status_code}.",
                status_code=response.status_code,
            ) from exc
