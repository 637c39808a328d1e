"""Configuration package."""

from money_journal.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    LearningSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "LearningSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
