"""Tests for the Google Sheets key-value backend (gspread is mocked)."""

import pytest
from unittest.mock import MagicMock
from tenacity import stop_after_attempt

from src.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStorage,
    StorageConnectionError,
    StorageError,
)
from src.services.storage.google_sheets import MAX_CELL_CHARS, STORAGE_COLUMNS


KEY = "flat_money_data"


def make_storage(rows):
    sheet = MagicMock()
    sheet.get_all_values.return_value = rows
    client = MagicMock()
    client.get_storage_sheet.return_value = sheet
    return GoogleSheetsKeyValueStorage(client=client), sheet


class TestRead:
    """Tests for reading keys."""

    def test_read_existing(self):
        storage, _ = make_storage([STORAGE_COLUMNS, [KEY, "[]", "2024-01-01T00:00:00"]])
        assert storage.read(KEY) == "[]"

    def test_read_missing(self):
        storage, _ = make_storage([STORAGE_COLUMNS])
        assert storage.read(KEY) is None

    def test_header_is_not_a_key(self):
        """Test that the header row is never matched."""
        storage, _ = make_storage([STORAGE_COLUMNS])
        assert storage.read("key") is None

    def test_read_failure(self):
        """Test that API errors surface as StorageError."""
        storage, sheet = make_storage([])
        sheet.get_all_values.side_effect = RuntimeError("API down")
        read_once = GoogleSheetsKeyValueStorage.read.retry_with(stop=stop_after_attempt(1))
        with pytest.raises(StorageError, match="API down"):
            read_once(storage, KEY)

    def test_connection_error_is_not_rewrapped(self):
        """Test that a connection failure keeps its own type."""
        storage, _ = make_storage([])
        storage._client.get_storage_sheet.side_effect = StorageConnectionError("Spreadsheet not found: x")
        read_once = GoogleSheetsKeyValueStorage.read.retry_with(stop=stop_after_attempt(1))
        with pytest.raises(StorageConnectionError, match="Spreadsheet not found"):
            read_once(storage, KEY)


class TestClient:
    """Tests for the gspread client wrapper."""

    def test_missing_credentials_file(self, tmp_path):
        settings = MagicMock(credentials_path=str(tmp_path / "missing.json"))
        connect_once = GoogleSheetsClient.connect.retry_with(stop=stop_after_attempt(1))
        with pytest.raises(StorageConnectionError, match="credentials file not found") as exc_info:
            connect_once(GoogleSheetsClient(settings))
        assert isinstance(exc_info.value, StorageError)
        assert not isinstance(exc_info.value, ConnectionError)


class TestWrite:
    """Tests for writing keys."""

    def test_write_appends_new_key(self):
        storage, sheet = make_storage([STORAGE_COLUMNS])
        storage.write(KEY, "[]")
        row = sheet.append_row.call_args.args[0]
        assert row[:2] == [KEY, "[]"]
        assert sheet.append_row.call_args.kwargs["value_input_option"] == "RAW"

    def test_write_updates_existing_key(self):
        storage, sheet = make_storage([
            STORAGE_COLUMNS,
            ["other", "x", ""],
            [KEY, "old", ""],
        ])
        storage.write(KEY, "new")
        sheet.append_row.assert_not_called()
        kwargs = sheet.update.call_args.kwargs
        assert kwargs["range_name"] == "B3:C3"
        assert kwargs["values"][0][0] == "new"

    def test_write_refuses_oversized_value(self):
        """Test that values beyond one cell are refused, not truncated."""
        storage, sheet = make_storage([STORAGE_COLUMNS])
        with pytest.raises(StorageError, match="at most"):
            storage.write(KEY, "x" * (MAX_CELL_CHARS + 1))
        sheet.append_row.assert_not_called()


class TestRemove:
    """Tests for removing keys."""

    def test_remove_existing(self):
        storage, sheet = make_storage([STORAGE_COLUMNS, [KEY, "[]", ""]])
        assert storage.remove(KEY) is True
        sheet.delete_rows.assert_called_once_with(2)

    def test_remove_missing(self):
        storage, sheet = make_storage([STORAGE_COLUMNS])
        assert storage.remove(KEY) is False
        sheet.delete_rows.assert_not_called()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
