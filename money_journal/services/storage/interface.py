"""
Abstract Storage Interface

DESIGN DECISION: All persistence goes through a tiny async key-value
interface, the same shape as browser local storage. This allows us to:
1. Keep data on disk for the desktop build (JSON file)
2. Use in-memory storage for testing
3. Swap in a remote backend (Google Sheets) without touching repositories

Every method is async even when the backend is synchronous, so a
networked backend fits the same call sites.

Keys passed to an adapter are logical (``users``, ``current-user-id``).
The adapter stores them under its namespace prefix, and ``keys()`` and
``clear()`` only ever see keys inside that namespace. Other applications
sharing the store are never touched.
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from money_journal.audit.logger import get_logger
from money_journal.errors import MoneyJournalError


logger = get_logger(__name__)

DEFAULT_NAMESPACE = "money_journal_"

QUOTA_EXCEEDED_MESSAGE = (
    "Storage quota exceeded. Please delete some data or export and clear your data."
)

_AVAILABILITY_PROBE_KEY = "__storage_test__"


class StorageError(MoneyJournalError):
    """Base exception for storage operations."""
    pass


class QuotaExceededError(StorageError):
    """A write would exceed the capacity of the store."""

    def __init__(self, message: str = QUOTA_EXCEEDED_MESSAGE):
        super().__init__(message)


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


def entry_size(key: str, value: str) -> int:
    """Approximate footprint of one entry (UTF-16, two bytes per char)."""
    return (len(key) + len(value)) * 2


def format_bytes(size: int) -> str:
    """Human-readable size: bytes below 1 KB, then KB or MB with two decimals."""
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


class StorageInterface(ABC):
    """
    Abstract async key-value store.

    Any storage implementation (in-memory, JSON file, Google Sheets)
    must implement these methods.
    """

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        quota_bytes: Optional[int] = None,
    ):
        if not namespace:
            raise ValueError("Storage namespace must not be empty")
        self._namespace = namespace
        self._quota_bytes = quota_bytes

    @property
    def namespace(self) -> str:
        return self._namespace

    def _full_key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    def _owns(self, full_key: str) -> bool:
        return full_key.startswith(self._namespace)

    def _logical_key(self, full_key: str) -> str:
        return full_key[len(self._namespace):]

    def _check_quota(self, entries: Mapping[str, str], full_key: str, value: str) -> None:
        """
        Raise QuotaExceededError if writing ``value`` would overflow.

        ``entries`` is everything currently in the store, including keys
        from other namespaces, since capacity is shared.
        """
        if self._quota_bytes is None:
            return
        used = sum(entry_size(k, v) for k, v in entries.items() if k != full_key)
        needed = entry_size(full_key, value)
        if used + needed > self._quota_bytes:
            logger.warning(
                "storage_quota_exceeded",
                key=full_key,
                used_bytes=used,
                needed_bytes=needed,
                quota_bytes=self._quota_bytes,
            )
            raise QuotaExceededError()

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored string, or None if the key is missing

        Raises:
            StorageError: If the backend fails
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """
        Write a value, replacing any previous one.

        Raises:
            QuotaExceededError: If the store is full
            StorageError: If the backend fails
        """
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Delete a key. Removing a missing key is a no-op."""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every key in this adapter's namespace, and nothing else."""
        pass

    @abstractmethod
    async def keys(self) -> list[str]:
        """List logical keys (namespace prefix stripped) in this namespace."""
        pass

    async def get_usage_bytes(self) -> int:
        """Approximate bytes used by this app's keys."""
        total = 0
        for key in await self.keys():
            value = await self.get_item(key)
            if value:
                total += entry_size(self._full_key(key), value)
        return total

    async def get_usage_string(self) -> str:
        return format_bytes(await self.get_usage_bytes())

    async def is_available(self) -> bool:
        """
        Check the store accepts a write and a delete.

        Returns False instead of raising, so callers can fall back.
        """
        try:
            await self.set_item(_AVAILABILITY_PROBE_KEY, "test")
            await self.remove_item(_AVAILABILITY_PROBE_KEY)
            return True
        except StorageError as e:
            logger.warning("storage_unavailable", error=str(e))
            return False
