from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - DEADLINES_DATA_DIR: directory holding the data file. Unset or empty keeps
      everything in memory (nothing is persisted).
    - DEADLINES_BACKEND: 'sqlite' (default) or 'json'; only used when
      DEADLINES_DATA_DIR is set
    - LOG_LEVEL: logging level name (default: INFO)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    """

    data_dir: Optional[str]
    persistence_backend: str
    log_level: str
    cors_allow_origins: List[str]

    @property
    def backend_name(self) -> str:
        """Name of the backend that will actually be used."""
        return "memory" if self.data_dir is None else self.persistence_backend


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    data_dir = _get_env("DEADLINES_DATA_DIR", "").strip() or None

    backend = _get_env("DEADLINES_BACKEND", "sqlite").strip().lower()
    if backend not in {"sqlite", "json"}:
        # Fallback to sqlite if unsupported
        backend = "sqlite"

    log_level = _get_env("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        log_level = "INFO"

    origins = _parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*"))

    return Settings(
        data_dir=data_dir,
        persistence_backend=backend,
        log_level=log_level,
        cors_allow_origins=origins,
    )
