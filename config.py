from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [x.strip() for x in raw.split(",") if x.strip()]


def _env_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw else None


@dataclass
class Settings:
    # production | development
    app_env: str = field(default_factory=lambda: os.getenv("APP_ENV", "production"))

    mongodb_uri: str = field(default_factory=lambda: os.getenv("MONGODB_URI", "mongodb://localhost:27017"))
    mongodb_db: str = field(default_factory=lambda: os.getenv("MONGODB_DB", "pgfinder"))
    mongodb_collection: str = field(default_factory=lambda: os.getenv("MONGODB_COLLECTION", "pglistings"))

    # Where the detail page fetches listings from (usually this same service).
    pg_api_base_url: str = field(default_factory=lambda: os.getenv("PG_API_BASE_URL", "http://127.0.0.1:8000"))
    # None keeps the requests default (no timeout).
    fetch_timeout: Optional[float] = field(default_factory=lambda: _env_float("FETCH_TIMEOUT"))

    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGINS"))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"


settings = Settings()
