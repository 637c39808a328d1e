"""
Tests for configuration loading.
"""

import pytest

from money_journal.config import (
    AppSettings,
    LearningSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestStorageSettings:
    """Tests for storage settings."""

    def test_defaults(self, monkeypatch):
        """Test the file backend and 5 MB quota are the defaults."""
        for name in ("BACKEND", "FILE_PATH", "NAMESPACE", "QUOTA_BYTES"):
            monkeypatch.delenv(f"MONEY_JOURNAL_STORAGE_{name}", raising=False)
        settings = StorageSettings()
        assert settings.backend == "file"
        assert settings.namespace == "money_journal_"
        assert settings.quota_bytes == 5 * 1024 * 1024

    def test_env_override(self, monkeypatch):
        """Test values come from prefixed environment variables."""
        monkeypatch.setenv("MONEY_JOURNAL_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("MONEY_JOURNAL_STORAGE_QUOTA_BYTES", "2048")
        settings = StorageSettings()
        assert settings.backend == "memory"
        assert settings.quota_bytes == 2048

    def test_unknown_backend_rejected(self, monkeypatch):
        """Test only known backends are accepted."""
        monkeypatch.setenv("MONEY_JOURNAL_STORAGE_BACKEND", "postgres")
        with pytest.raises(ValueError):
            StorageSettings()


class TestLearningSettings:
    """Tests for learning pacing."""

    def test_defaults(self, monkeypatch):
        """Test one hour between cards and a seven day retry."""
        monkeypatch.delenv("LEARNING_MIN_HOURS_BETWEEN_CARDS", raising=False)
        monkeypatch.delenv("LEARNING_DISMISSAL_RETRY_DAYS", raising=False)
        settings = LearningSettings()
        assert settings.min_hours_between_cards == 1.0
        assert settings.dismissal_retry_days == 7.0

    def test_negative_rejected(self, monkeypatch):
        """Test pacing values cannot be negative."""
        monkeypatch.setenv("LEARNING_MIN_HOURS_BETWEEN_CARDS", "-1")
        with pytest.raises(ValueError):
            LearningSettings()


class TestAppSettings:
    """Tests for app settings and the aggregate check."""

    def test_version_default(self, monkeypatch):
        """Test the version written into exports."""
        monkeypatch.delenv("APP_VERSION", raising=False)
        assert AppSettings().app_version == "1.0.0"

    def test_validate_all_skips_sheets_for_file_backend(self, monkeypatch):
        """Test Google Sheets is only checked when selected."""
        monkeypatch.setenv("MONEY_JOURNAL_STORAGE_BACKEND", "file")
        results = validate_all_settings()
        assert results["storage"] is True
        assert "google_sheets" not in results

    def test_validate_all_reports_missing_sheets_config(self, monkeypatch):
        """Test a selected Sheets backend without credentials is reported."""
        monkeypatch.setenv("MONEY_JOURNAL_STORAGE_BACKEND", "google_sheets")
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        results = validate_all_settings()
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
