"""Tests for settings and structured event logging."""

import pytest
from unittest.mock import MagicMock

from src.config import (
    LedgerSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)
from src.models.events import LedgerEventBuilder
from src.observability import LedgerEventLogger


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_ledger_defaults(self):
        settings = LedgerSettings()
        assert settings.locale == "pt_BR"
        assert settings.default_admin_fee_percent == 35
        assert settings.default_partners_count == 2

    def test_storage_from_env(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("LEDGER_STORAGE_KEY", "other_key")
        settings = StorageSettings()
        assert settings.backend == "memory"
        assert settings.key == "other_key"

    def test_invalid_backend(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "floppy")
        with pytest.raises(ValueError):
            StorageSettings()

    def test_validate_all_settings_reports_missing_sheets(self, monkeypatch):
        """Test that unconfigured Google Sheets is reported, not raised."""
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        results = validate_all_settings()
        assert results["ledger"] is True
        assert results["storage"] is True
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results


class TestLedgerEventLogger:
    """Tests for severity-based logging."""

    def test_levels_follow_severity(self):
        logger = MagicMock()
        events = LedgerEventLogger(logger)

        events.log(LedgerEventBuilder.storage_corrupted("bad", "k"))
        events.log(LedgerEventBuilder.save_failed("quota", 1))
        events.log(LedgerEventBuilder.import_rejected("bad", 2))
        events.log(LedgerEventBuilder.ledger_saved(1, "k"))
        events.log(LedgerEventBuilder.ledger_loaded(1, "k"))

        logger.critical.assert_called_once()
        logger.error.assert_called_once()
        logger.warning.assert_called_once()
        logger.debug.assert_called_once()
        logger.info.assert_called_once()

    def test_event_fields_are_logged(self):
        logger = MagicMock()
        LedgerEventLogger(logger).log_record_created("r1", "Março/2024")
        args, kwargs = logger.info.call_args
        assert args == ("ledger_event",)
        assert kwargs["event_type"] == "record_created"
        assert kwargs["record_id"] == "r1"

    def test_logging_failure_is_swallowed(self):
        """Test that a broken logger never breaks a ledger operation."""
        logger = MagicMock()
        logger.info.side_effect = RuntimeError("handler exploded")
        LedgerEventLogger(logger).log_ledger_loaded(0, "k")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
