"""
app/api/routers package marker.
"""

from app.api.routers.csv_ingestion import router as csv_ingestion_router
from app.api.routers.dashboard_router import router as dashboard_router
from app.api.routers.insight_router import router as insight_router

__all__ = [
    "csv_ingestion_router",
    "dashboard_router",
    "insight_router",
]
