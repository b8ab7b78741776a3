from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI
from pydantic import BaseModel

from app.config import allowed_llm_adapters, load_env_files
from app.services.dashboard_service import DashboardService, get_dashboard_service

_INT_ENV_VARS = (
    "CSV_INGEST_MAX_UPLOAD_BYTES",
    "SHEET_FETCH_MAX_RETRIES",
    "DASHBOARD_TOP_N",
    "LLM_MAX_TOKENS",
    "INSIGHT_SAMPLE_ROWS",
)

_FLOAT_ENV_VARS = (
    "SHEET_FETCH_TIMEOUT_SECONDS",
    "SHEET_FETCH_BACKOFF_INITIAL_SECONDS",
    "SHEET_FETCH_BACKOFF_MULTIPLIER",
)


class HealthResponse(BaseModel):
    status: str
    dataset_loaded: bool


def _validate_env() -> None:
    """
    Validate environment variables at startup.

    Raises RuntimeError listing every malformed variable so the operator
    can fix all problems in one restart cycle. A missing LLM API key is
    only a warning: the dashboard works without AI insights.
    """

    load_env_files()

    errors: list[str] = []

    adapter = os.getenv("LLM_ADAPTER", "openai").strip().lower()
    if adapter not in allowed_llm_adapters():
        errors.append(
            f"LLM_ADAPTER='{adapter}' is not valid. Allowed values: {sorted(allowed_llm_adapters())}."
        )

    for name in _INT_ENV_VARS:
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            int(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' must be an integer.")

    for name in _FLOAT_ENV_VARS:
        raw = os.getenv(name)
        if raw is None:
            continue
        try:
            float(raw)
        except ValueError:
            errors.append(f"{name}='{raw}' must be a number.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    if adapter == "openai":
        llm_api_key = os.getenv("LLM_API_KEY", "").strip()
        openai_api_key = os.getenv("OPENAI_API_KEY", "").strip()
        if not llm_api_key and not openai_api_key:
            logging.getLogger(__name__).warning(
                "LLM API key is not set; AI insights are disabled. "
                "Provide LLM_API_KEY or OPENAI_API_KEY, or set LLM_ADAPTER=mock."
            )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()
    _validate_env()

    application = FastAPI(
        title="utmdash API",
        version="1.0.0",
    )

    from app.api.routers import csv_ingestion_router, dashboard_router, insight_router

    application.include_router(csv_ingestion_router)
    application.include_router(dashboard_router)
    application.include_router(insight_router)

    @application.get("/health")
    def healthcheck(
        dashboard: DashboardService = Depends(get_dashboard_service),
    ) -> HealthResponse:
        return HealthResponse(status="ok", dataset_loaded=dashboard.table is not None)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=os.getenv("API_HOST", "127.0.0.1"), port=int(os.getenv("API_PORT", "8000")))
