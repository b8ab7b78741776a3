"""
app/logging_utils.py

Structured log lines for ingestion and dashboard events.

Every line is one JSON object: an ``event`` name plus arbitrary fields,
keys sorted so that lines from repeated runs diff cleanly.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator


def _render(event: str, fields: dict[str, Any]) -> str:
    return json.dumps({"event": event, **fields}, default=str, sort_keys=True)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    if logger.isEnabledFor(level):
        logger.log(level, _render(event, fields))


@contextmanager
def timed_event(
    logger: logging.Logger,
    event: str,
    *,
    level: int = logging.DEBUG,
    **fields: Any,
) -> Iterator[dict[str, Any]]:
    """
    Log ``event`` with an ``elapsed_ms`` field once the block exits.

    The yielded dict collects fields that are only known inside the block;
    they are merged over ``fields``.
    """

    collected: dict[str, Any] = {}
    started = time.perf_counter()
    try:
        yield collected
    finally:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        log_event(logger, level, event, **{**fields, **collected, "elapsed_ms": elapsed_ms})
