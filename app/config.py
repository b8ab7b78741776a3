"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

_ALLOWED_LLM_ADAPTERS = {"openai", "mock"}

COLUMN_FIELDS: tuple[str, ...] = (
    "date",
    "product",
    "revenue",
    "source",
    "campaign",
    "content",
)


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _raw_env(name: str) -> str | None:
    """
    Stripped value of ``name``; ``None`` when unset or blank.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_int_env(name: str, default: int) -> int:
    raw_value = _raw_env(name)
    try:
        return int(raw_value) if raw_value is not None else default
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw_value = _raw_env(name)
    try:
        return float(raw_value) if raw_value is not None else default
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    return _raw_env(name) or default


def _get_optional_str_env(name: str) -> str | None:
    return _raw_env(name)


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Comma-separated values of ``name``; ``default`` when none are given.
    """

    raw_value = _raw_env(name)
    if raw_value is None:
        return default
    items = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class CSVIngestionSettings:
    """
    Runtime settings for CSV ingestion.
    """

    encoding: str = "utf-8-sig"
    max_upload_bytes: int = 20 * 1024 * 1024


@dataclass(frozen=True)
class SheetFetchSettings:
    """
    HTTP behavior settings for published spreadsheet downloads.

    Retries are disabled by default: a failed download surfaces to the
    operator immediately.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 0
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class ColumnSpec:
    """
    Resolution rule for one logical column.

    ``synonyms`` are matched against header names first; ``fallback_index``
    is the zero-based header position used when no synonym matches.
    """

    synonyms: tuple[str, ...]
    fallback_index: int | None = None


DEFAULT_COLUMN_SPECS: dict[str, ColumnSpec] = {
    "date": ColumnSpec(synonyms=("data venda", "data"), fallback_index=1),
    "product": ColumnSpec(synonyms=("produto",), fallback_index=8),
    "revenue": ColumnSpec(synonyms=("valor da venda", "valor"), fallback_index=12),
    "source": ColumnSpec(synonyms=("utm_source", "source"), fallback_index=29),
    "campaign": ColumnSpec(synonyms=("utm_campaign", "campanha"), fallback_index=31),
    "content": ColumnSpec(synonyms=("utm_content", "conteúdo"), fallback_index=33),
}


@dataclass(frozen=True)
class ColumnResolutionSettings:
    """
    Column resolution rules for every logical field.
    """

    specs: dict[str, ColumnSpec] = field(default_factory=lambda: dict(DEFAULT_COLUMN_SPECS))


@dataclass(frozen=True)
class DashboardSettings:
    """
    Runtime settings for dashboard views.
    """

    top_n: int = 5


@dataclass(frozen=True)
class LLMSettings:
    """
    AI insight adapter settings.
    """

    adapter: str = "openai"
    model: str = "gpt-4o-mini"
    max_tokens: int = 2048
    api_key: str | None = None
    base_url: str | None = None
    sample_rows: int = 50
    language: str = "pt-BR"


@lru_cache(maxsize=1)
def get_csv_ingestion_settings() -> CSVIngestionSettings:
    """
    Return cached CSV ingestion settings from environment variables.
    """

    return CSVIngestionSettings(
        encoding=_get_str_env("CSV_INGEST_ENCODING", "utf-8-sig"),
        max_upload_bytes=max(1, _get_int_env("CSV_INGEST_MAX_UPLOAD_BYTES", 20 * 1024 * 1024)),
    )


@lru_cache(maxsize=1)
def get_sheet_fetch_settings() -> SheetFetchSettings:
    """
    Return spreadsheet download settings from environment variables.
    """

    return SheetFetchSettings(
        timeout_seconds=max(1.0, _get_float_env("SHEET_FETCH_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("SHEET_FETCH_MAX_RETRIES", 0)),
        backoff_initial_seconds=max(0.1, _get_float_env("SHEET_FETCH_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("SHEET_FETCH_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_column_resolution_settings() -> ColumnResolutionSettings:
    """
    Return column resolution rules, with per-field environment overrides.

    ``COLUMN_<FIELD>_SYNONYMS`` replaces the synonym list (comma-separated);
    ``COLUMN_<FIELD>_INDEX`` replaces the positional fallback (negative
    disables it).
    """

    specs: dict[str, ColumnSpec] = {}
    for name in COLUMN_FIELDS:
        default = DEFAULT_COLUMN_SPECS[name]
        prefix = f"COLUMN_{name.upper()}"
        index = _get_int_env(f"{prefix}_INDEX", -1 if default.fallback_index is None else default.fallback_index)
        specs[name] = ColumnSpec(
            synonyms=_get_list_env(f"{prefix}_SYNONYMS", default.synonyms),
            fallback_index=index if index >= 0 else None,
        )
    return ColumnResolutionSettings(specs=specs)


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Return dashboard view settings.
    """

    return DashboardSettings(top_n=max(1, _get_int_env("DASHBOARD_TOP_N", 5)))


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return AI insight adapter settings from environment variables.
    """

    return LLMSettings(
        adapter=_get_str_env("LLM_ADAPTER", "openai").lower(),
        model=_get_str_env("LLM_MODEL", "gpt-4o-mini"),
        max_tokens=max(1, _get_int_env("LLM_MAX_TOKENS", 2048)),
        api_key=_get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("OPENAI_API_KEY"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
        sample_rows=max(1, _get_int_env("INSIGHT_SAMPLE_ROWS", 50)),
        language=_get_str_env("INSIGHT_LANGUAGE", "pt-BR"),
    )


def allowed_llm_adapters() -> set[str]:
    """
    Return the adapter names accepted by ``LLM_ADAPTER``.
    """

    return set(_ALLOWED_LLM_ADAPTERS)
