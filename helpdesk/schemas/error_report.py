"""Error report schemas."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorReportCreate(BaseModel):
    correlation_id: str = Field(min_length=1, max_length=64)
    category: str = Field(min_length=1, max_length=50)
    description: str = ""
    url: str | None = None
    additional_data: dict[str, Any] = Field(default_factory=dict)


class ErrorReportRead(BaseModel):
    correlation_id: str
    category: str
    user_context: dict[str, Any]
    description: str
    additional_data: dict[str, Any]
    status: str
    resolution: str | None = None
    reported_at: datetime
    resolved_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ErrorReportResolve(BaseModel):
    resolution: str = ""


class ErrorReportStats(BaseModel):
    total: int
    by_category: dict[str, int]
    by_date: dict[str, int]
    unresolved: int
