"""
Audit Logger

DESIGN DECISION: Every significant action on a child's data is logged.
This provides:
1. Complete traceability
2. Debugging capability
3. Parents can see the history of changes

The audit logger:
- Is async so callers await it like any other repository step
- Never raises into the caller (logging must not break a save)
- Writes structured JSON lines through structlog
"""

from typing import Optional

import structlog

from money_journal.models.audit import AuditEvent, AuditEventBuilder, AuditEventType


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger (configuration above is applied on import)."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Events are emitted as structured log lines under the ``audit`` logger.
    """

    def __init__(self, logger_name: str = "money_journal.audit"):
        self._logger = get_logger(logger_name)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        try:
            log_dict = event.to_log_dict()

            if event.severity.value in ("error", "critical"):
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
            return True
        except Exception as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_log_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False

    async def log_user_created(self, user_id: str, name: str) -> None:
        """Log user creation."""
        await self.log(AuditEventBuilder.user_created(user_id=user_id, name=name))

    async def log_user_updated(self, user_id: str, fields: list[str]) -> None:
        """Log a name or password change."""
        await self.log(AuditEventBuilder.user_updated(user_id=user_id, fields=fields))

    async def log_user_deleted(
        self,
        user_id: str,
        transactions_removed: int,
        goals_removed: int,
    ) -> None:
        """Log cascade delete of a user."""
        await self.log(AuditEventBuilder.user_deleted(
            user_id=user_id,
            transactions_removed=transactions_removed,
            goals_removed=goals_removed,
        ))

    async def log_login_attempt(self, user_id: str, succeeded: bool) -> None:
        """Log an emoji password check."""
        await self.log(AuditEventBuilder.login_attempt(user_id=user_id, succeeded=succeeded))

    async def log_current_user_changed(self, user_id: Optional[str]) -> None:
        """Log a user switch (None means logout)."""
        await self.log(AuditEventBuilder.current_user_changed(user_id))

    async def log_transaction_event(
        self,
        event_type: AuditEventType,
        user_id: str,
        transaction_id: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a transaction create/update/delete."""
        await self.log(AuditEventBuilder.transaction_changed(
            event_type=event_type,
            user_id=user_id,
            transaction_id=transaction_id,
            details=details,
        ))

    async def log_goal_event(
        self,
        event_type: AuditEventType,
        user_id: str,
        goal_id: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a goal create/update/delete/funding."""
        await self.log(AuditEventBuilder.goal_changed(
            event_type=event_type,
            user_id=user_id,
            goal_id=goal_id,
            details=details,
        ))

    async def log_export_created(
        self,
        user_id: str,
        transaction_count: int,
        goal_count: int,
    ) -> None:
        """Log a backup file being produced."""
        await self.log(AuditEventBuilder.export_created(
            user_id=user_id,
            transaction_count=transaction_count,
            goal_count=goal_count,
        ))

    async def log_import_completed(self, user_id: str, summary: dict) -> None:
        """Log a successful import merge."""
        await self.log(AuditEventBuilder.import_completed(user_id=user_id, summary=summary))

    async def log_import_rejected(self, user_id: str, reason: str) -> None:
        """Log an import file that failed validation."""
        await self.log(AuditEventBuilder.import_rejected(user_id=user_id, reason=reason))

    async def log_learning_interaction(
        self,
        event_type: AuditEventType,
        user_id: str,
        card_id: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log a learning card being shown, acknowledged or dismissed."""
        await self.log(AuditEventBuilder.learning_interaction(
            event_type=event_type,
            user_id=user_id,
            card_id=card_id,
            details=details,
        ))

    async def log_parental_action(
        self,
        event_type: AuditEventType,
        description: str,
        user_id: Optional[str] = None,
    ) -> None:
        """Log an action taken from the parent panel."""
        await self.log(AuditEventBuilder.parental_action(
            event_type=event_type,
            description=description,
            user_id=user_id,
        ))

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        key: Optional[str] = None,
    ) -> None:
        """Log a storage failure that was surfaced to the caller."""
        await self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            key=key,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        ))
