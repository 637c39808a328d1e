"""Services package."""

from money_journal.services.storage import (
    GoogleSheetsStorage,
    InMemoryStorage,
    JSONFileStorage,
    QuotaExceededError,
    StorageError,
    StorageInterface,
    create_storage,
)

__all__ = [
    # Storage services
    "GoogleSheetsStorage",
    "InMemoryStorage",
    "JSONFileStorage",
    "QuotaExceededError",
    "StorageError",
    "StorageInterface",
    "create_storage",
]
