"""
Google Sheets Storage Implementation

DESIGN DECISION: A worksheet of key/value rows is a remote key-value
store. It shows the storage interface holds for a networked backend:
1. Parents can look at the raw data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Every call is a network round trip (fine for one family)
- No transactions (each write touches a single row)
- A cell holds at most 50,000 characters, which is the quota here

Rows are ``key | value | updated_at``; row 1 is the header.
"""

from datetime import datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from money_journal.audit.logger import get_logger
from money_journal.config import GoogleSheetsSettings, get_settings
from money_journal.services.storage.interface import (
    DEFAULT_NAMESPACE,
    QuotaExceededError,
    StorageConnectionError,
    StorageError,
    StorageInterface,
)


logger = get_logger(__name__)

KV_COLUMNS = ["key", "value", "updated_at"]

# Google Sheets hard limit per cell
MAX_CELL_CHARS = 50_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for the connection.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = ["https://www.googleapis.com/auth/spreadsheets"]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(self._settings.spreadsheet_id)
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_kv_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.sheet_name,
                rows=100,
                cols=len(KV_COLUMNS),
            )
            sheet.append_row(KV_COLUMNS)
        return sheet


class GoogleSheetsStorage(StorageInterface):
    """Key-value storage backed by one Google Sheets worksheet."""

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        namespace: str = DEFAULT_NAMESPACE,
    ):
        super().__init__(namespace=namespace)
        self._client = client or GoogleSheetsClient()

    def _rows(self) -> tuple[gspread.Worksheet, list[list[str]]]:
        sheet = self._client.get_kv_sheet()
        # Row 1 is the header
        return sheet, sheet.get_all_values()[1:]

    @staticmethod
    def _find_row(rows: list[list[str]], full_key: str) -> Optional[int]:
        """1-based sheet row number for a key, or None."""
        for idx, row in enumerate(rows, start=2):
            if row and row[0] == full_key:
                return idx
        return None

    def _failed(self, operation: str, key: Optional[str], error: Exception) -> StorageError:
        logger.error("sheets_storage_failed", operation=operation, key=key, error=str(error))
        return StorageError(f"Failed to {operation} data: {error}")

    async def get_item(self, key: str) -> Optional[str]:
        full_key = self._full_key(key)
        try:
            _, rows = self._rows()
            for row in rows:
                if row and row[0] == full_key:
                    return row[1] if len(row) > 1 else ""
            return None
        except StorageError:
            raise
        except Exception as e:
            raise self._failed("read", full_key, e) from e

    async def set_item(self, key: str, value: str) -> None:
        full_key = self._full_key(key)
        if len(value) > MAX_CELL_CHARS:
            logger.warning("sheets_cell_limit_exceeded", key=full_key, length=len(value))
            raise QuotaExceededError()

        updated_at = datetime.now(timezone.utc).isoformat()
        try:
            sheet, rows = self._rows()
            row_number = self._find_row(rows, full_key)
            if row_number is None:
                sheet.append_row([full_key, value, updated_at], value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"A{row_number}:C{row_number}",
                    values=[[full_key, value, updated_at]],
                    value_input_option="RAW",
                )
        except StorageError:
            raise
        except Exception as e:
            raise self._failed("save", full_key, e) from e

    async def remove_item(self, key: str) -> None:
        full_key = self._full_key(key)
        try:
            sheet, rows = self._rows()
            row_number = self._find_row(rows, full_key)
            if row_number is not None:
                sheet.delete_rows(row_number)
        except StorageError:
            raise
        except Exception as e:
            raise self._failed("remove", full_key, e) from e

    async def clear(self) -> None:
        try:
            sheet, rows = self._rows()
            owned = [
                idx for idx, row in enumerate(rows, start=2)
                if row and self._owns(row[0])
            ]
            # Bottom-up so earlier row numbers stay valid
            for row_number in reversed(owned):
                sheet.delete_rows(row_number)
        except StorageError:
            raise
        except Exception as e:
            raise self._failed("clear", None, e) from e

    async def keys(self) -> list[str]:
        try:
            _, rows = self._rows()
            return [self._logical_key(row[0]) for row in rows if row and self._owns(row[0])]
        except StorageError:
            raise
        except Exception as e:
            raise self._failed("list", None, e) from e
