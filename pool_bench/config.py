"""
Configuration settings for the pool insert benchmark.

Uses Pydantic Settings to resolve database connection details, pool sizing and
benchmark defaults from environment variables and an optional `.env` file.
Integer settings never fail validation: unset, malformed or out-of-range values
fall back to their documented default.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pool_bench.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_ENV_FILE = ".env"

# Smallest accepted value per integer field; anything lower is treated as invalid.
_INT_MINIMUMS: Dict[str, int] = {
    "db_port": 1,
    "db_pool_size": 1,
    "db_connect_attempts": 1,
    "benchmark_insert_count": 0,
}


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASS")
    db_name: str = Field("insert_benchmark", alias="DB_NAME")
    db_pool_size: int = Field(5, alias="DB_POOL_SIZE")
    db_connect_attempts: int = Field(1, alias="DB_CONNECT_ATTEMPTS")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Benchmark
    benchmark_insert_count: int = Field(1000, alias="BENCHMARK_INSERT_COUNT")
    benchmark_table: str = Field("users", alias="BENCHMARK_TABLE")

    model_config = SettingsConfigDict(
        env_file=DEFAULT_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    @field_validator(
        "db_port", "db_pool_size", "db_connect_attempts", "benchmark_insert_count", mode="before"
    )
    @classmethod
    def _int_or_default(cls, value: Any, info: ValidationInfo) -> Any:
        default = cls.model_fields[info.field_name].default
        if value is None or isinstance(value, bool):
            return default
        try:
            parsed = int(str(value).strip())
        except ValueError:
            log.debug(
                "Ignoring malformed integer setting",
                extra={"setting": info.field_name, "value": str(value), "default": default},
            )
            return default
        if parsed < _INT_MINIMUMS[info.field_name]:
            return default
        return parsed

    def describe(self) -> str:
        """One-line summary with the password masked."""
        return (
            f"DB={self.db_user}@{self.db_host}:{self.db_port}/{self.db_name} | "
            f"pool_size={self.db_pool_size} rows={self.benchmark_insert_count} "
            f"table={self.benchmark_table}"
        )


def load_settings(env_file: Optional[str | Path] = DEFAULT_ENV_FILE) -> Settings:
    """
    Resolve settings from the environment and, when present, ``env_file``.

    A missing env file is not an error: a warning is logged and values come
    from the process environment and defaults.
    """
    if env_file is not None and not Path(env_file).is_file():
        log.warning(
            f"Could not load {env_file} (using environment variables directly)",
            extra={"env_file": str(env_file)},
        )
        env_file = None
    return Settings(_env_file=env_file)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return load_settings()


__all__ = ["Settings", "get_settings", "load_settings"]
