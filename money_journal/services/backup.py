"""
Export / Import

A backup file holds one user's transactions and goals:

    {"version": 1, "exportedAt": "...", "appVersion": "1.0.0",
     "user": {"name": "...", "transactions": [...], "goals": [...]}}

DESIGN DECISION: Import is validate-then-merge.
1. The whole file is checked against the exact export schema first.
   Any failure rejects the file and nothing is written.
2. Items are merged by id in one atomic write. Ids the user already
   has (or that repeat inside the file) are skipped and counted.
"""

import json
import re
from datetime import date, datetime
from typing import Optional, Union

from money_journal.audit.logger import AuditLogger
from money_journal.models.backup import ExportData, ExportedUser, ImportSummary
from money_journal.models.finance import User, utc_now
from money_journal.repositories.errors import NotFoundError
from money_journal.repositories.user_repository import UserRepository
from money_journal.validation.validator import ValidationError, serialize, validate


_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-z0-9]", re.IGNORECASE | re.ASCII)


def export_user_data(
    user: User,
    app_version: str = "1.0.0",
    now: Optional[datetime] = None,
) -> ExportData:
    """Build the export document for one user."""
    return ExportData(
        exported_at=now or utc_now(),
        app_version=app_version,
        user=ExportedUser(
            name=user.name,
            transactions=user.transactions,
            goals=user.goals,
        ),
    )


def dump_export(data: ExportData) -> str:
    """Pretty-printed JSON text of an export."""
    return json.dumps(serialize(data), indent=2, ensure_ascii=False)


def generate_export_filename(username: str, today: Optional[date] = None) -> str:
    """``money-journal-<name>-<yyyy-mm-dd>.json``, name lowercased and sanitized."""
    today = today or utc_now().date()
    sanitized = _UNSAFE_FILENAME_CHARS.sub("-", username).lower()
    return f"money-journal-{sanitized}-{today.isoformat()}.json"


def validate_import_data(json_text: str) -> ExportData:
    """
    Parse and validate an import file.

    Raises:
        ValidationError: Not JSON, or not an export document
    """
    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid import file: not valid JSON ({e.msg})", field="") from e
    return validate(ExportData, parsed, "Invalid import file")


class BackupService:
    """Exports a user to a backup file and merges backups back in."""

    def __init__(
        self,
        user_repository: UserRepository,
        app_version: str = "1.0.0",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._users = user_repository
        self._app_version = app_version
        self._audit = audit_logger or AuditLogger()

    async def _require_user(self, user_id: str) -> User:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f'User with ID "{user_id}" not found')
        return user

    async def export_user(self, user_id: str, now: Optional[datetime] = None) -> ExportData:
        user = await self._require_user(user_id)
        data = export_user_data(user, self._app_version, now)
        await self._audit.log_export_created(
            user_id,
            transaction_count=len(user.transactions),
            goal_count=len(user.goals),
        )
        return data

    async def export_user_json(self, user_id: str, now: Optional[datetime] = None) -> str:
        return dump_export(await self.export_user(user_id, now))

    async def import_into_user(
        self,
        user_id: str,
        data: Union[str, dict, ExportData],
    ) -> ImportSummary:
        """
        Merge a backup into an existing user.

        Raises:
            ValidationError: The file is invalid (nothing is written)
            NotFoundError: Unknown user id
        """
        try:
            if isinstance(data, str):
                export = validate_import_data(data)
            else:
                export = validate(ExportData, data, "Invalid import file")
        except ValidationError as e:
            await self._audit.log_import_rejected(user_id, e.message)
            raise

        def merge(user: User) -> ImportSummary:
            summary = ImportSummary()

            known_transactions = {t.id for t in user.transactions}
            for transaction in export.user.transactions:
                if transaction.id in known_transactions:
                    summary.transactions_skipped += 1
                    continue
                user.transactions.append(transaction)
                known_transactions.add(transaction.id)
                summary.transactions_added += 1

            known_goals = {g.id for g in user.goals}
            for goal in export.user.goals:
                if goal.id in known_goals:
                    summary.goals_skipped += 1
                    continue
                user.goals.append(goal)
                known_goals.add(goal.id)
                summary.goals_added += 1

            return summary

        summary = await self._users.apply_to_user(user_id, merge)
        await self._audit.log_import_completed(user_id, summary.model_dump())
        return summary
