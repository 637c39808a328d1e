"""
Configuration Management for Money Journal

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage backend selection, cache lifetime and learning pacing all live in
one place, and every value is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value storage backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONEY_JOURNAL_STORAGE_",
        extra="ignore"
    )

    backend: Literal["memory", "file", "google_sheets"] = Field(
        default="file",
        description="Which storage adapter to build"
    )
    file_path: str = Field(
        default="money_journal_data.json",
        description="Path of the JSON file used by the file backend"
    )
    namespace: str = Field(
        default="money_journal_",
        min_length=1,
        description="Prefix applied to every key this app writes"
    )
    quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Capacity of the store (browser local storage is ~5 MB)"
    )


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets key-value backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    sheet_name: str = Field(
        default="KeyValue",
        description="Name of the worksheet holding key/value rows"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class LearningSettings(BaseSettings):
    """Pacing of the learning cards."""

    model_config = SettingsConfigDict(
        env_prefix="LEARNING_",
        extra="ignore"
    )

    min_hours_between_cards: float = Field(
        default=1.0,
        ge=0.0,
        description="Minimum time between two cards"
    )
    dismissal_retry_days: float = Field(
        default=7.0,
        ge=0.0,
        description="Days before a dismissed card comes back in another format"
    )


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

    app_version: str = Field(
        default="1.0.0",
        description="Version written into export files"
    )

    # Repository cache
    user_cache_ttl_seconds: float = Field(
        default=60.0,
        ge=0.0,
        description="How long the in-memory user collection stays fresh"
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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def learning(self) -> LearningSettings:
        return LearningSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Google Sheets is only checked when it is the selected backend.
    """
    results = {}

    settings = get_settings()

    try:
        storage = settings.storage
        results["storage"] = True
    except Exception as e:
        storage = None
        results["storage"] = False
        results["storage_error"] = str(e)

    if storage is not None and storage.backend == "google_sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    try:
        _ = settings.learning
        results["learning"] = True
    except Exception as e:
        results["learning"] = False
        results["learning_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
