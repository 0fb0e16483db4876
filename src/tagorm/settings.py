"""Connection and runtime settings.

All fields can be set via ``TAGORM_*`` environment variables (e.g.
``TAGORM_DATABASE_URL=postgresql://localhost/app``) or a ``.env`` file.

Fields
──────
driver           : Dialect name (postgres, mysql, sqlite); only postgres executes
database_url     : Connection string handed to asyncpg
pool_min_size    : Minimum pooled connections
pool_max_size    : Maximum pooled connections
command_timeout  : Per-statement timeout in seconds
ssl              : Enable TLS to the server
echo_statements  : Log every statement and its arguments before execution
log_level        : Structlog log level
log_format       : ``json`` or ``console``
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DRIVERS = ("postgres", "postgresql", "mysql", "sqlite")


class OrmSettings(BaseSettings):
    """tagorm configuration."""

    model_config = SettingsConfigDict(
        env_prefix="TAGORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Connection ───────────────────────────────────────────────
    driver: str = Field(default="postgres")
    database_url: str = Field(default="")

    # ── Pool ─────────────────────────────────────────────────────
    pool_min_size: int = Field(default=1, ge=0)
    pool_max_size: int = Field(default=10, ge=1)
    command_timeout: float = Field(default=60.0, gt=0)
    ssl: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    echo_statements: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("driver")
    @classmethod
    def _normalize_driver(cls, value: str) -> str:
        value = value.strip().lower()
        if value and value not in DRIVERS:
            raise ValueError(f"unknown driver {value!r}, expected one of {', '.join(DRIVERS)}")
        return value

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return value


_settings_cache: dict[str, OrmSettings] = {}


def get_settings(*, _force_reload: bool = False) -> OrmSettings:
    """Load and cache :class:`OrmSettings` from the environment."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = OrmSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    _settings_cache.clear()


__all__ = ["OrmSettings", "get_settings", "clear_settings_cache", "DRIVERS"]
