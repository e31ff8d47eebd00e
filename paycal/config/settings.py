"""
Configuration Management for Paycal

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself takes plain arguments; hosts read these settings and
pass the values in, so engine calls stay pure and testable.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Rescheduling and recurrence knobs."""

    model_config = SettingsConfigDict(
        env_prefix="PAYCAL_ENGINE_",
        extra="ignore"
    )

    occurrence_count: int = Field(
        default=12,
        ge=1,
        le=520,
        description="How many occurrences a recurring event expands into"
    )
    lookahead_months: int = Field(
        default=1,
        ge=1,
        le=12,
        description="How far past its due date a bill may be deferred"
    )
    split_suggestion_threshold: float = Field(
        default=500.0,
        ge=0.0,
        description="Bills at or above this amount are offered a split"
    )
    default_savings_percentage: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="Default share of a payday set aside as savings"
    )


class StorageSettings(BaseSettings):
    """Event storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PAYCAL_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="memory",
        pattern="^(memory|json)$",
        description="Which event storage adapter to use"
    )
    snapshot_path: str = Field(
        default="calendar-store.json",
        description="Path of the JSON snapshot when backend=json"
    )

    @field_validator('snapshot_path')
    @classmethod
    def validate_snapshot_path(cls, v: str) -> str:
        """Warn if the snapshot directory is missing (it is created on first write)."""
        parent = Path(v).expanduser().parent
        if not parent.exists():
            import warnings
            warnings.warn(
                f"Snapshot directory {parent} does not exist yet. "
                "It will be created on the first write."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local structured logs"
    )

    # Display
    upcoming_paydays_limit: int = Field(
        default=4,
        ge=1,
        le=52,
        description="How many upcoming paydays the summary view shows"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def engine(self) -> EngineSettings:
        return EngineSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    {setting_name}_error entries for the ones that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("engine", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
