"""
app/schemas/insight.py

Response schema for AI insight endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class InsightResponse(BaseModel):
    text: str = Field(..., min_length=1)
