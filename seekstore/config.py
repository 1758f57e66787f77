"""
Runtime settings for seekstore.

Read from the environment (or a local ``.env``) through pydantic-settings:
where the database lives, how large its connection pool may grow, how the CLI
logs, and the page size `browse` uses when none is given.
"""
from __future__ import annotations

from functools import lru_cache
from urllib.parse import quote

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Store
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("seekstore", alias="DB_NAME")
    db_pool_min: int = Field(1, ge=0, alias="DB_POOL_MIN")
    db_pool_max: int = Field(10, ge=1, alias="DB_POOL_MAX")

    # CLI
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Paging
    default_page_size: int = Field(10, gt=0, alias="DEFAULT_PAGE_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def dsn(self) -> str:
        """libpq URL; user and password are percent-encoded."""
        return (
            f"postgresql://{quote(self.db_user, safe='')}:{quote(self.db_password, safe='')}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings parsed once per process."""
    return Settings()


__all__ = ["Settings", "get_settings"]
