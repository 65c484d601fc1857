"""Relational reading store built on SQLAlchemy Core."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Integer,
    MetaData,
    Table,
    Text,
    and_,
    desc,
    func,
    insert,
    select,
    true,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from datastore.base import Clock, StorageError, as_utc, utc_now
from models.records import PageWindow, Reading, ReadingFilter

logger = logging.getLogger(__name__)


def build_readings_table(metadata: MetaData, name: str = "sensor_readings") -> Table:
    return Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("device_id", Text, nullable=True),
        Column("payload", JSON().with_variant(JSONB(), "postgresql"), nullable=False),
        Column(
            "timestamp_utc",
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
        ),
    )


class SqlReadingStore:

    backend = "sql"

    def __init__(
        self,
        engine: Engine,
        table_name: str = "sensor_readings",
        clock: Clock = utc_now,
    ) -> None:
        self.engine = engine
        self._clock = clock
        self._metadata = MetaData()
        self.table = build_readings_table(self._metadata, table_name)

    def ensure_schema(self) -> None:
        """Create the readings table if it is absent. Failures are logged, not raised."""
        try:
            self._metadata.create_all(self.engine, checkfirst=True)
        except SQLAlchemyError as exc:
            logger.error(
                "Could not create readings table",
                exc_info=exc,
                extra={"backend": self.backend, "error": exc},
            )
            return
        logger.info("%s table ready", self.table.name, extra={"backend": self.backend})

    def insert(
        self,
        device_id: Optional[str],
        payload: Dict[str, Any],
        timestamp: Optional[datetime] = None,
    ) -> Reading:
        stamp = as_utc(timestamp) if timestamp is not None else self._clock()
        statement = insert(self.table).values(
            device_id=device_id, payload=payload, timestamp_utc=stamp
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement)
                reading_id = result.inserted_primary_key[0]
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc
        return Reading(id=reading_id, device_id=device_id, payload=dict(payload), timestamp=stamp)

    def query(
        self, reading_filter: ReadingFilter, window: PageWindow
    ) -> Tuple[List[Reading], int]:
        condition = self._build_condition(reading_filter)
        columns = self.table.c
        rows_statement = (
            select(columns.id, columns.device_id, columns.payload, columns.timestamp_utc)
            .where(condition)
            .order_by(desc(columns.timestamp_utc), desc(columns.id))
            .limit(window.limit)
            .offset(window.offset)
        )
        count_statement = select(func.count()).select_from(self.table).where(condition)

        try:
            with self.engine.connect() as conn:
                total = conn.execute(count_statement).scalar_one()
                rows = conn.execute(rows_statement).all()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

        readings = [
            Reading(
                id=row.id,
                device_id=row.device_id,
                payload=row.payload,
                timestamp=as_utc(row.timestamp_utc),
            )
            for row in rows
        ]
        return readings, int(total)

    def close(self) -> None:
        self.engine.dispose()

    def _build_condition(self, reading_filter: ReadingFilter):
        column = self.table.c.timestamp_utc
        clauses = [column >= as_utc(bound) for bound in reading_filter.lower_bounds]
        clauses.extend(column <= as_utc(bound) for bound in reading_filter.upper_bounds)
        if not clauses:
            return true()
        return and_(*clauses)
