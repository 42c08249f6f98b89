from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="PHIGuard API", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    database_url: str = Field(default="sqlite+pysqlite:///./phiguard_audit.db", alias="DATABASE_URL")
    audit_salt: str = Field(default="change-me", alias="AUDIT_SALT")
    phi_strict_mode: bool = Field(default=False, alias="PHI_STRICT_MODE")
    phi_max_content_chars: int = Field(default=1_000_000, alias="PHI_MAX_CONTENT_CHARS", gt=0)
    phi_masking_enabled: bool = Field(default=True, alias="PHI_MASKING_ENABLED")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
