"""
Tests for the audit logger.
"""

import asyncio

import pytest

from money_journal.audit import AuditLogger
from money_journal.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class SpyLogger:
    """Records which level each structlog call used."""

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def _record(self, level, event, **kwargs):
        if self.fail and event == "audit_event":
            raise RuntimeError("log sink unavailable")
        self.calls.append((level, event, kwargs))

    def info(self, event, **kwargs):
        self._record("info", event, **kwargs)

    def debug(self, event, **kwargs):
        self._record("debug", event, **kwargs)

    def warning(self, event, **kwargs):
        self._record("warning", event, **kwargs)

    def error(self, event, **kwargs):
        self._record("error", event, **kwargs)


def audit_with(spy):
    audit = AuditLogger()
    audit._logger = spy
    return audit


class TestAuditLogger:
    """Tests for AuditLogger dispatch."""

    @pytest.mark.parametrize("severity,level", [
        (AuditSeverity.DEBUG, "debug"),
        (AuditSeverity.INFO, "info"),
        (AuditSeverity.WARNING, "warning"),
        (AuditSeverity.ERROR, "error"),
        (AuditSeverity.CRITICAL, "error"),
    ])
    def test_severity_selects_level(self, severity, level):
        """Test each severity is written at the matching log level."""
        spy = SpyLogger()
        event = AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=severity,
            description="Something happened",
        )
        assert asyncio.run(audit_with(spy).log(event)) is True
        assert spy.calls[0][0] == level
        assert spy.calls[0][2]["event_type"] == "system_error"

    def test_failure_is_swallowed(self):
        """Test a broken sink returns False instead of raising."""
        spy = SpyLogger(fail=True)
        event = AuditEventBuilder.user_created("user_1", "Sam")
        assert asyncio.run(audit_with(spy).log(event)) is False
        assert spy.calls[0][1] == "audit_log_failed"

    def test_log_error(self):
        """Test system errors are logged at error level with their details."""
        spy = SpyLogger()

        async def scenario():
            await audit_with(spy).log_error("StartupError", "settings missing", {"key": "x"})

        asyncio.run(scenario())
        level, _, fields = spy.calls[0]
        assert level == "error"
        assert fields["error_message"] == "settings missing"
        assert fields["details"]["key"] == "x"

    def test_storage_error_event(self):
        """Test storage failures carry the operation and key."""
        spy = SpyLogger()

        async def scenario():
            await audit_with(spy).log_storage_error("save_users", "disk full", key="users")

        asyncio.run(scenario())
        fields = spy.calls[0][2]
        assert fields["event_type"] == "storage_error"
        assert fields["error_message"] == "disk full"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
