import os
from functools import lru_cache

from pydantic import BaseModel, Field


# =========================
# Environment
# =========================

DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_MAX_ASSET_BYTES = 50 * 1024 * 1024


class Settings(BaseModel):
    fetch_timeout: float = Field(default=DEFAULT_FETCH_TIMEOUT, gt=0)
    max_asset_bytes: int = Field(default=DEFAULT_MAX_ASSET_BYTES, gt=0)

    cms_project_id: str | None = None
    cms_dataset: str = "production"
    cms_api_version: str = "2024-01-01"

    log_level: str = "INFO"
    # Log level field name may be different depending on the log collector
    log_level_name: str = "severity"


def load_settings() -> Settings:
    return Settings(
        fetch_timeout=float(
            os.getenv("WATERMARK_FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT)
        ),
        max_asset_bytes=int(
            os.getenv("WATERMARK_MAX_ASSET_BYTES", DEFAULT_MAX_ASSET_BYTES)
        ),
        cms_project_id=os.getenv("CMS_PROJECT_ID") or None,
        cms_dataset=os.getenv("CMS_DATASET", "production"),
        cms_api_version=os.getenv("CMS_API_VERSION", "2024-01-01"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_level_name=os.getenv("LOG_LEVEL_NAME", "severity"),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
