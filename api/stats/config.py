"""Stats service configuration. Every variable is prefixed with ``STATS_``."""

from functools import lru_cache

from pydantic_settings import SettingsConfigDict

from core.config import DatabaseSettings


class StatsSettings(DatabaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STATS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app_name: str = "ewm-stats-service"
    enable_docs: bool = True


@lru_cache(maxsize=1)
def get_stats_settings() -> StatsSettings:
    return StatsSettings()


def clear_stats_settings_cache() -> None:
    get_stats_settings.cache_clear()
