"""Process-level settings resolved from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    app_name: str
    app_version: str
    log_level: str
    settings_file_path: Path
    seed_demo_data: bool
    host: str
    port: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build settings once per process; tests derive variants with dataclasses.replace."""
    return Settings(
        app_name=os.getenv("CONSERVATION_APP_NAME", "Conservation Allocation Service"),
        app_version=os.getenv("CONSERVATION_APP_VERSION", "1.0.0"),
        log_level=os.getenv("CONSERVATION_LOG_LEVEL", "INFO"),
        settings_file_path=Path(
            os.getenv("CONSERVATION_SETTINGS_FILE", "config/settings.json")
        ),
        seed_demo_data=_env_bool("CONSERVATION_SEED_DEMO_DATA", True),
        host=os.getenv("CONSERVATION_HOST", "127.0.0.1"),
        port=int(os.getenv("CONSERVATION_PORT", "8000")),
    )
