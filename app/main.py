from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router
from app.schemas import StorageFailure
from datastore.base import StorageError
from datastore.factory import build_default_store
from logging_config import configure_logging
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    store = build_default_store()
    store.ensure_schema()
    try:
        yield
    finally:
        store.close()
        build_default_store.cache_clear()


async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
    logger.exception(
        "Storage operation failed for %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
        extra={"error": exc},
    )
    body = StorageFailure(error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(),
    )


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Sensor Ingest",
        description="Stores JSON sensor readings posted by devices and serves them back with time filters.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StorageError, handle_storage_error)
    app.include_router(router)
    return app


def run() -> None:
    settings = get_settings()
    uvicorn.run("app.main:app", host=settings.host, port=settings.port)


app = create_app()
