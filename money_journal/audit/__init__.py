"""Audit logging package."""

from money_journal.audit.logger import AuditLogger, get_logger

__all__ = ["AuditLogger", "get_logger"]
