"""
Audit Models for Money Journal

Every significant action on a child's data is recorded as an audit event.
This provides:
1. Traceability of who changed what (child or parent)
2. Debugging information when things go wrong
3. A history parents can review

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from money_journal.models.finance import utc_now


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every repository write and every authentication attempt has its own type.
    """
    # Users and sessions
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    CURRENT_USER_CHANGED = "current_user_changed"
    CURRENT_USER_CLEARED = "current_user_cleared"

    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"
    GOAL_FUNDED = "goal_funded"

    # Backup
    EXPORT_CREATED = "export_created"
    IMPORT_COMPLETED = "import_completed"
    IMPORT_REJECTED = "import_rejected"

    # Learning
    LEARNING_CARD_SHOWN = "learning_card_shown"
    LEARNING_CARD_ACKNOWLEDGED = "learning_card_acknowledged"
    LEARNING_CARD_DISMISSED = "learning_card_dismissed"

    # Parental controls
    ADMIN_PIN_SET = "admin_pin_set"
    ADMIN_PIN_CLEARED = "admin_pin_cleared"
    ADMIN_PIN_VERIFIED = "admin_pin_verified"
    ADMIN_AUTH_FAILED = "admin_auth_failed"
    DATA_RESET = "data_reset"

    # System events
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'transaction', 'goal')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="Owning user, when the entity belongs to one"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.user_created(user_id, name)
        event = AuditEventBuilder.transaction_created(user_id, txn_id, "income", "5.00")
    """

    @staticmethod
    def user_created(user_id: str, name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_CREATED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=f"User created: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def user_updated(user_id: str, fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_UPDATED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=f"User updated: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def user_deleted(
        user_id: str,
        transactions_removed: int,
        goals_removed: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="User and all embedded data deleted",
            details={
                "transactions_removed": transactions_removed,
                "goals_removed": goals_removed,
            },
            is_user_action=True,
        )

    @staticmethod
    def login_attempt(user_id: str, succeeded: bool) -> AuditEvent:
        if succeeded:
            return AuditEvent(
                event_type=AuditEventType.LOGIN_SUCCEEDED,
                entity_type="user",
                entity_id=user_id,
                user_id=user_id,
                description="Emoji password accepted",
                is_user_action=True,
            )
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="Emoji password rejected",
            is_user_action=True,
        )

    @staticmethod
    def current_user_changed(user_id: Optional[str]) -> AuditEvent:
        if user_id is None:
            return AuditEvent(
                event_type=AuditEventType.CURRENT_USER_CLEARED,
                description="Current user cleared (logout)",
            )
        return AuditEvent(
            event_type=AuditEventType.CURRENT_USER_CHANGED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="Current user changed",
        )

    @staticmethod
    def transaction_changed(
        event_type: AuditEventType,
        user_id: str,
        transaction_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        verb = event_type.value.rsplit("_", 1)[-1]
        return AuditEvent(
            event_type=event_type,
            entity_type="transaction",
            entity_id=transaction_id,
            user_id=user_id,
            description=f"Transaction {verb}",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def goal_changed(
        event_type: AuditEventType,
        user_id: str,
        goal_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        verb = event_type.value.rsplit("_", 1)[-1]
        return AuditEvent(
            event_type=event_type,
            entity_type="goal",
            entity_id=goal_id,
            user_id=user_id,
            description=f"Goal {verb}",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def export_created(user_id: str, transaction_count: int, goal_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_CREATED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="User data exported",
            details={
                "transactions": transaction_count,
                "goals": goal_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_completed(user_id: str, summary: dict) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description=(
                f"Import merged {summary.get('transactions_added', 0)} transactions "
                f"and {summary.get('goals_added', 0)} goals"
            ),
            details=summary,
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(user_id: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            description="Import file rejected as invalid",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def learning_interaction(
        event_type: AuditEventType,
        user_id: str,
        card_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.DEBUG,
            entity_type="learning_card",
            entity_id=card_id,
            user_id=user_id,
            description=f"Learning card {event_type.value.rsplit('_', 1)[-1]}: {card_id}",
            details=details or {},
        )

    @staticmethod
    def parental_action(
        event_type: AuditEventType,
        description: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        severity = (
            AuditSeverity.WARNING
            if event_type in (
                AuditEventType.ADMIN_AUTH_FAILED,
                AuditEventType.ADMIN_PIN_CLEARED,
                AuditEventType.DATA_RESET,
            )
            else AuditSeverity.INFO
        )
        return AuditEvent(
            event_type=event_type,
            severity=severity,
            entity_type="user" if user_id else None,
            entity_id=user_id,
            user_id=user_id,
            description=description,
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        key: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation, "key": key},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
