from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DECLVAL_", env_file=".env", extra="ignore")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for JSON lines, False for colored console output

    # Validation defaults
    VALIDATION_MODE: str = "collect_all"  # or "fail_fast"
    CONVERT: bool = True
    ALLOW_UNKNOWN: bool = False
    STRIP_UNKNOWN: bool = False
    PRESENCE: str = "optional"  # optional | required | forbidden


@lru_cache
def get_settings() -> Settings:
    return Settings()
