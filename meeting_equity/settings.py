"""Runtime configuration read from the environment."""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

DEFAULT_HOLIDAY_API_BASE_URL = "https://date.nager.at/api/v3"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value not in (None, "") else default


@dataclass
class Settings:
    """Engine settings; every field falls back to an environment variable."""
    holiday_api_base_url: str = field(
        default_factory=lambda: os.getenv("HOLIDAY_API_BASE_URL", DEFAULT_HOLIDAY_API_BASE_URL)
    )
    holiday_api_timeout: float = field(default_factory=lambda: _env_float("HOLIDAY_API_TIMEOUT", 10.0))
    holiday_max_attempts: int = field(default_factory=lambda: _env_int("HOLIDAY_MAX_ATTEMPTS", 3))
    holiday_initial_retry_delay: float = field(
        default_factory=lambda: _env_float("HOLIDAY_INITIAL_RETRY_DELAY", 1.0)
    )
    holiday_cache_ttl_days: int = field(default_factory=lambda: _env_int("HOLIDAY_CACHE_TTL_DAYS", 7))
    holiday_cache_path: Optional[str] = field(default_factory=lambda: os.getenv("HOLIDAY_CACHE_PATH") or None)
    holiday_prefetch_workers: int = field(default_factory=lambda: _env_int("HOLIDAY_PREFETCH_WORKERS", 4))
    heatmap_cache_ttl_seconds: int = field(
        default_factory=lambda: _env_int("HEATMAP_CACHE_TTL_SECONDS", 3600)
    )
    heatmap_cache_max_entries: int = field(
        default_factory=lambda: _env_int("HEATMAP_CACHE_MAX_ENTRIES", 256)
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "text"))


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Load variables from a .env file (if present) and build Settings."""
    load_dotenv(env_file)
    return Settings()
