"""
app/api/routers/csv_ingestion.py

Dataset ingestion HTTP endpoints: file upload, published sheet, reset.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import parse_column_overrides, require_csv_upload
from app.connectors.sheet_connector import SheetFetchError
from app.mappers.column_resolver import ColumnMappingError
from app.schemas.csv_ingestion import DatasetResponse, IngestionSummaryResponse, SheetLoadRequest
from app.services.csv_ingestion_service import CSVIngestionError, CSVUploadTooLargeError
from app.services.dashboard_service import (
    DashboardService,
    DatasetNotLoadedError,
    get_dashboard_service,
)

router = APIRouter(tags=["ingestion"])


@router.post("/upload-csv", response_model=IngestionSummaryResponse)
def upload_csv(
    file: UploadFile = Depends(require_csv_upload),
    column_overrides: dict[str, str] | None = Depends(parse_column_overrides),
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> IngestionSummaryResponse:
    """
    Load one CSV file as the current dataset.

    An optional ``column_overrides`` form field (JSON object) pins dashboard
    fields to headers, as on ``/load-sheet``.
    """

    try:
        summary = dashboard.load_upload(file, column_overrides=column_overrides)
    except CSVUploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except CSVIngestionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ColumnMappingError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    finally:
        file.file.close()

    return IngestionSummaryResponse.from_summary(summary)


@router.post("/load-sheet", response_model=IngestionSummaryResponse)
def load_sheet(
    body: SheetLoadRequest,
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> IngestionSummaryResponse:
    """
    Download a published spreadsheet as CSV and load it as the current dataset.
    """

    try:
        summary = dashboard.load_sheet(body.url, column_overrides=body.column_overrides)
    except SheetFetchError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=exc.message,
        ) from exc
    except ColumnMappingError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc

    return IngestionSummaryResponse.from_summary(summary)


@router.get("/dataset", response_model=DatasetResponse)
def get_dataset(
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> DatasetResponse:
    """
    Describe the loaded table and the columns resolved for it.
    """

    try:
        table, columns = dashboard.require_table()
    except DatasetNotLoadedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return DatasetResponse(
        headers=list(table.headers),
        types=dict(table.types),
        row_count=len(table.rows),
        columns=columns.as_dict(),
    )


@router.delete("/dataset", status_code=status.HTTP_204_NO_CONTENT)
def reset_dataset(
    dashboard: DashboardService = Depends(get_dashboard_service),
) -> None:
    """
    Drop the loaded table and every spend input.
    """

    dashboard.reset()
