"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import PlainTextResponse

from app.schemas import ReadingCreated, ReadingPage, StorageFailure
from datastore.base import ReadingStore
from datastore.factory import build_default_store
from services.formatting import format_display, format_iso
from services.ingestion import IngestionService
from services.query import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, QueryParams, QueryService

router = APIRouter()

_STORAGE_ERROR_RESPONSE = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": StorageFailure},
}


def get_store() -> ReadingStore:
    return build_default_store()


def get_ingestion_service(store: ReadingStore = Depends(get_store)) -> IngestionService:
    return IngestionService(store)


def get_query_service(store: ReadingStore = Depends(get_store)) -> QueryService:
    return QueryService(store)


@router.get(
    "/",
    summary="Liveness text response.",
    response_class=PlainTextResponse,
)
async def root() -> str:
    return "Sensor ingest API running"


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck(store: ReadingStore = Depends(get_store)) -> dict[str, str]:
    return {"status": "ok", "backend": store.backend}


@router.post("/api/data", include_in_schema=False, status_code=status.HTTP_201_CREATED)
@router.post("/api/sensor", include_in_schema=False, status_code=status.HTTP_201_CREATED)
@router.post(
    "/data",
    status_code=status.HTTP_201_CREATED,
    response_model=ReadingCreated,
    responses=_STORAGE_ERROR_RESPONSE,
    summary="Store one sensor reading.",
)
def create_reading(
    body: Any = Body(default=None, description="JSON object of sensor fields."),
    service: IngestionService = Depends(get_ingestion_service),
) -> ReadingCreated:
    try:
        result = service.ingest(body)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    reading = result.reading
    return ReadingCreated(
        id=reading.id,
        device_id=reading.device_id,
        timestamp=format_iso(reading.timestamp),
        timestamp_formatted=format_display(reading.timestamp),
        received=result.received,
    )


@router.get(
    "/data",
    response_model=ReadingPage,
    responses=_STORAGE_ERROR_RESPONSE,
    summary="List stored readings, newest first.",
)
def list_readings(
    minutes: Optional[int] = Query(None, ge=0, description="Only readings from the last N minutes."),
    hours: Optional[int] = Query(None, ge=0, description="Only readings from the last N hours."),
    days: Optional[int] = Query(None, ge=0, description="Only readings from the last N days."),
    from_: Optional[str] = Query(None, alias="from", description="Inclusive lower bound (ISO-8601)."),
    to: Optional[str] = Query(None, description="Inclusive upper bound (ISO-8601)."),
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", ge=1, le=MAX_PAGE_SIZE),
    service: QueryService = Depends(get_query_service),
) -> ReadingPage:
    params = QueryParams(
        minutes=minutes,
        hours=hours,
        days=days,
        from_=from_,
        to=to,
        page=page,
        page_size=page_size,
    )
    try:
        return service.list_readings(params)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
