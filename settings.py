from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple


_DATABASE_URL_ENV = "DATABASE_URL"
_TABLE_NAME_ENV = "SENSOR_TABLE_NAME"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_CORS_ORIGINS_ENV = "CORS_ORIGINS"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    database_url: Optional[str]
    table_name: str
    host: str
    port: int
    cors_origins: Tuple[str, ...]
    log_level: str

    @property
    def backend(self) -> str:
        return "sql" if self.database_url else "memory"


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_database_url() -> Optional[str]:
    value = os.getenv(_DATABASE_URL_ENV)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    # Hosted Postgres providers still hand out the scheme SQLAlchemy dropped.
    if candidate.startswith("postgres://"):
        candidate = "postgresql://" + candidate[len("postgres://"):]
    return candidate


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 < parsed < 65536 else default


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        database_url=_read_database_url(),
        table_name=_read_str_env(_TABLE_NAME_ENV, "sensor_readings"),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_port(8080),
        cors_origins=_read_origins(("*",)),
        log_level=_read_log_level("INFO"),
    )
