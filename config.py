"""Environment-driven settings for the bioscience client."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_CACHE_MAX_ENTRIES = 100
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True, slots=True)
class Settings:
    api_url: str
    timeout_seconds: float
    cache_max_entries: int
    log_level: str


def load_settings() -> Settings:
    """Read settings from the environment.

    Call after ``load_dotenv()`` so values from a local ``.env`` file apply.
    """
    return Settings(
        api_url=os.getenv("BIOSCIENCE_API_URL", DEFAULT_API_URL).rstrip("/"),
        timeout_seconds=float(os.getenv("BIOSCIENCE_API_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))),
        cache_max_entries=int(os.getenv("BIOSCIENCE_CACHE_MAX_ENTRIES", str(DEFAULT_CACHE_MAX_ENTRIES))),
        log_level=os.getenv("BIOSCIENCE_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
