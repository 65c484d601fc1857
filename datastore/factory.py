from __future__ import annotations

import logging
from functools import lru_cache

from sqlalchemy import create_engine

from datastore.base import ReadingStore
from datastore.memory import InMemoryReadingStore
from datastore.sql import SqlReadingStore
from settings import Settings, get_settings

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> ReadingStore:
    """Pick the durable store when a database URL is configured, the volatile one otherwise."""
    if not settings.database_url:
        return InMemoryReadingStore()

    engine = create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_recycle=300,
        future=True,
    )
    logger.info(
        "Using relational storage on %s",
        engine.url.render_as_string(hide_password=True),
        extra={"backend": "sql"},
    )
    return SqlReadingStore(engine=engine, table_name=settings.table_name)


@lru_cache
def build_default_store() -> ReadingStore:
    return build_store(get_settings())
