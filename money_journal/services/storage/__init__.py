"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
The JSON file backend is the default; in-memory is for tests and
Google Sheets shows the interface holds for a remote store.
"""

from typing import Optional

from money_journal.config import Settings, get_settings
from money_journal.services.storage.interface import (
    DEFAULT_NAMESPACE,
    QUOTA_EXCEEDED_MESSAGE,
    QuotaExceededError,
    StorageConnectionError,
    StorageError,
    StorageInterface,
    entry_size,
    format_bytes,
)
from money_journal.services.storage.memory import InMemoryStorage
from money_journal.services.storage.file import JSONFileStorage
from money_journal.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsStorage,
)


def create_storage(settings: Optional[Settings] = None) -> StorageInterface:
    """Build the adapter selected by ``MONEY_JOURNAL_STORAGE_BACKEND``."""
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage_settings.backend == "memory":
        return InMemoryStorage(
            namespace=storage_settings.namespace,
            quota_bytes=storage_settings.quota_bytes,
        )
    if storage_settings.backend == "google_sheets":
        return GoogleSheetsStorage(
            client=GoogleSheetsClient(settings.google_sheets),
            namespace=storage_settings.namespace,
        )
    return JSONFileStorage(
        path=storage_settings.file_path,
        namespace=storage_settings.namespace,
        quota_bytes=storage_settings.quota_bytes,
    )


__all__ = [
    # Interface
    "DEFAULT_NAMESPACE",
    "QUOTA_EXCEEDED_MESSAGE",
    "StorageInterface",
    "entry_size",
    "format_bytes",
    # Exceptions
    "QuotaExceededError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsStorage",
    "InMemoryStorage",
    "JSONFileStorage",
    "create_storage",
]
