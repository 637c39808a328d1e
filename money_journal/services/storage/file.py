"""
JSON File Storage

The desktop counterpart of browser local storage: one JSON object on
disk mapping namespaced keys to string values.

DESIGN DECISION: Every write replaces the whole file atomically
(write to a temp file in the same directory, then ``os.replace``).
A crash mid-write leaves the previous file intact, never a torn one.

The file is re-read on every call, so edits by another process are
picked up without a restart.
"""

import errno
import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from money_journal.audit.logger import get_logger
from money_journal.services.storage.interface import (
    DEFAULT_NAMESPACE,
    QuotaExceededError,
    StorageError,
    StorageInterface,
)


logger = get_logger(__name__)

# Disk full / user quota reached
_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, OSError) and exc.errno not in _QUOTA_ERRNOS


class JSONFileStorage(StorageInterface):
    """Persistent key-value storage in a single JSON file."""

    def __init__(
        self,
        path: Union[str, Path],
        namespace: str = DEFAULT_NAMESPACE,
        quota_bytes: Optional[int] = None,
    ):
        super().__init__(namespace=namespace, quota_bytes=quota_bytes)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Load the whole file. A missing file is an empty store."""
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except json.JSONDecodeError as e:
            logger.error("storage_file_corrupt", path=str(self._path), error=str(e))
            raise StorageError(f"Storage file is not valid JSON: {self._path}") from e
        except OSError as e:
            logger.error("storage_read_failed", path=str(self._path), error=str(e))
            raise StorageError(f"Failed to read data: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Storage file must hold a JSON object: {self._path}")
        return data

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, max=1),
        retry=retry_if_exception(_is_transient),
        reraise=True,
    )
    def _write_all(self, data: dict[str, str]) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=directory,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def _persist(self, data: dict[str, str], operation: str, key: Optional[str] = None) -> None:
        try:
            self._write_all(data)
        except OSError as e:
            if e.errno in _QUOTA_ERRNOS:
                logger.warning("storage_disk_full", path=str(self._path), key=key)
                raise QuotaExceededError() from e
            logger.error(
                "storage_write_failed",
                operation=operation,
                key=key,
                path=str(self._path),
                error=str(e),
            )
            raise StorageError(f"Failed to {operation} data: {e}") from e

    async def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(self._full_key(key))

    async def set_item(self, key: str, value: str) -> None:
        full_key = self._full_key(key)
        data = self._read_all()
        self._check_quota(data, full_key, value)
        data[full_key] = value
        self._persist(data, "save", full_key)

    async def remove_item(self, key: str) -> None:
        full_key = self._full_key(key)
        data = self._read_all()
        if full_key not in data:
            return
        del data[full_key]
        self._persist(data, "remove", full_key)

    async def clear(self) -> None:
        data = self._read_all()
        remaining = {k: v for k, v in data.items() if not self._owns(k)}
        if len(remaining) != len(data):
            self._persist(remaining, "clear")

    async def keys(self) -> list[str]:
        return [self._logical_key(k) for k in self._read_all() if self._owns(k)]
