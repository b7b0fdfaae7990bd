"""Application configuration loaded from environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for the DStats service."""

    app_name: str = "DStats"
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"
    store_backend: str = "auto"
    redis_url: str | None = None
    store_prefix: str = "dstats"
    bucket_ttl_seconds: int = 86_400
    series_length: int = 60
    refresh_interval_seconds: int = 30
    use_utc: bool = False
    dashboard_path: str = "/stats"
    script_path: str = "/stats.js"
    stats_api_path: str = "/api/stats"
    chart_library_url: str = "https://code.highcharts.com/highcharts.js"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings so env parsing only happens once."""

    return Settings()
