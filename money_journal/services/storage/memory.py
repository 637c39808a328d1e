"""
In-Memory Storage

Dict-backed adapter used by tests and by the ``memory`` backend setting.
Passing a shared ``store`` dict lets several namespaces live side by
side, the way browser local storage is shared by every app on an origin.
"""

from typing import Optional

from money_journal.services.storage.interface import (
    DEFAULT_NAMESPACE,
    StorageInterface,
)


class InMemoryStorage(StorageInterface):
    """Non-persistent storage. Data is lost when the process exits."""

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        quota_bytes: Optional[int] = None,
        store: Optional[dict[str, str]] = None,
    ):
        super().__init__(namespace=namespace, quota_bytes=quota_bytes)
        self._store = store if store is not None else {}

    async def get_item(self, key: str) -> Optional[str]:
        return self._store.get(self._full_key(key))

    async def set_item(self, key: str, value: str) -> None:
        full_key = self._full_key(key)
        self._check_quota(self._store, full_key, value)
        self._store[full_key] = value

    async def remove_item(self, key: str) -> None:
        self._store.pop(self._full_key(key), None)

    async def clear(self) -> None:
        for full_key in [k for k in self._store if self._owns(k)]:
            del self._store[full_key]

    async def keys(self) -> list[str]:
        return [self._logical_key(k) for k in self._store if self._owns(k)]
