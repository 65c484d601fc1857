"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ReadingCreated(BaseModel):
    """Response payload after a reading has been stored."""

    message: str = "Data stored successfully"
    id: int = Field(..., ge=1)
    device_id: Optional[str] = None
    timestamp: str = Field(..., description="Server receive time, ISO-8601 UTC.")
    timestamp_formatted: str = Field(
        ..., description="Server receive time in East Africa Time (YYYY-MM-DD HH:MM:SS)."
    )
    received: Dict[str, Any] = Field(
        ..., description="Stored payload with device id fields removed."
    )


class PaginationMeta(BaseModel):
    page: int = Field(..., ge=1)
    pageSize: int = Field(..., ge=1)
    totalRows: int = Field(..., ge=0)
    totalPages: int = Field(..., ge=0)
    hasNext: bool
    hasPrev: bool


class ReadingOut(BaseModel):
    """A stored reading as presented to clients."""

    id: int
    device_id: Optional[str] = None
    payload: Dict[str, Any]
    timestamp: str = Field(..., description="Receive time in East Africa Time.")
    timestamp_utc: str = Field(..., description="Receive time, ISO-8601 UTC.")


class ReadingPage(BaseModel):
    pagination: PaginationMeta
    data: List[ReadingOut] = Field(default_factory=list)


class StorageFailure(BaseModel):
    message: str = "Database error"
    error: str
