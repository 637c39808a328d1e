"""
Data Models Package

This package contains all Pydantic models used in Money Journal.
All data crossing a storage boundary must conform to these schemas.
"""

from money_journal.models.finance import (
    Goal,
    GoalInput,
    GoalUpdate,
    JournalModel,
    Transaction,
    TransactionInput,
    TransactionLocation,
    TransactionType,
    TransactionUpdate,
    User,
    UserInput,
    UserUpdate,
    UtcDatetime,
    ensure_utc,
    new_id,
    utc_now,
)
from money_journal.models.learning import (
    ContentType,
    InteractionData,
    InteractionRecord,
    InteractionType,
    LearningCard,
    LearningStats,
    SliderLabels,
    UserProgress,
)
from money_journal.models.backup import (
    EXPORT_FORMAT_VERSION,
    ExportData,
    ExportedUser,
    ImportSummary,
)
from money_journal.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "Goal",
    "GoalInput",
    "GoalUpdate",
    "JournalModel",
    "Transaction",
    "TransactionInput",
    "TransactionLocation",
    "TransactionType",
    "TransactionUpdate",
    "User",
    "UserInput",
    "UserUpdate",
    "UtcDatetime",
    "ensure_utc",
    "new_id",
    "utc_now",
    # Learning models
    "ContentType",
    "InteractionData",
    "InteractionRecord",
    "InteractionType",
    "LearningCard",
    "LearningStats",
    "SliderLabels",
    "UserProgress",
    # Backup models
    "EXPORT_FORMAT_VERSION",
    "ExportData",
    "ExportedUser",
    "ImportSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
