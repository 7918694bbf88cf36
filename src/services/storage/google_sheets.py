"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets can hold the ledger so that the partners
can open the raw data themselves, with Google's backups behind it.

Layout: one worksheet with columns [key, value, updated_at], one row per
key. The ledger JSON lives in a single cell, so a write is one cell update
and a reader sees either the old ledger or the new one.

TRADEOFFS:
- A cell holds at most 50,000 characters (a few hundred months; we
  refuse larger values instead of truncating them)
- Every call goes over the network (retried with backoff)
"""

from datetime import datetime, timezone
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from src.config import GoogleSheetsSettings, get_settings
from src.services.storage.interface import (
    StorageConnectionError,
    KeyValueStorageInterface,
    StorageError,
)


STORAGE_COLUMNS = ["key", "value", "updated_at"]

# Google Sheets limit for the content of one cell
MAX_CELL_CHARS = 50_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
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
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
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
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_storage_sheet(self) -> gspread.Worksheet:
        """Get or create the key-value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.storage_sheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.storage_sheet_name,
                rows=100,
                cols=len(STORAGE_COLUMNS),
            )
            sheet.append_row(STORAGE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStorage(KeyValueStorageInterface):
    """
    Google Sheets implementation of key-value storage.

    Row 1 is the header; keys are looked up by scanning column A.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, key: str) -> Optional[tuple[int, list]]:
        """1-based sheet row number and values of ``key``, if present."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if row and row[0] == key:
                return idx, row
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def read(self, key: str) -> Optional[str]:
        try:
            sheet = self._client.get_storage_sheet()
            found = self._find_row(sheet, key)
        except StorageConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read key {key!r}: {e}")

        if found is None:
            return None
        _, row = found
        return row[1] if len(row) > 1 else ""

    def write(self, key: str, value: str) -> None:
        if len(value) > MAX_CELL_CHARS:
            raise StorageError(
                f"Value for {key!r} has {len(value)} characters; "
                f"a sheet cell holds at most {MAX_CELL_CHARS}"
            )
        self._write_row(key, value)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write_row(self, key: str, value: str) -> None:
        updated_at = datetime.now(timezone.utc).isoformat()
        try:
            sheet = self._client.get_storage_sheet()
            found = self._find_row(sheet, key)
            if found is None:
                sheet.append_row([key, value, updated_at], value_input_option="RAW")
            else:
                idx, _ = found
                sheet.update(
                    range_name=f"B{idx}:C{idx}",
                    values=[[value, updated_at]],
                    value_input_option="RAW",
                )
        except StorageConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write key {key!r}: {e}")

    def remove(self, key: str) -> bool:
        try:
            sheet = self._client.get_storage_sheet()
            found = self._find_row(sheet, key)
            if found is None:
                return False
            idx, _ = found
            sheet.delete_rows(idx)
            return True
        except StorageConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to remove key {key!r}: {e}")
