"""
Parental Controls

A 4-digit admin PIN gates a small parent panel: reset a child's emoji
password, rename or delete a child, or wipe all app data.

The PIN shares the key-value store with everything else (``admin-pin``).
Like the emoji password it is a household convenience, not security.
"""

import re
from typing import Optional, Sequence

from money_journal.audit.logger import AuditLogger
from money_journal.models.audit import AuditEventType
from money_journal.models.finance import User
from money_journal.repositories.user_repository import UserRepository
from money_journal.services.storage.interface import StorageInterface
from money_journal.validation.validator import ValidationError


ADMIN_PIN_KEY = "admin-pin"

_PIN_PATTERN = re.compile(r"[0-9]{4}")


class ParentalControls:
    """Admin PIN management and parent-only user actions."""

    def __init__(
        self,
        storage: StorageInterface,
        user_repository: UserRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._users = user_repository
        self._audit = audit_logger or AuditLogger()

    # =========================================================================
    # PIN
    # =========================================================================

    async def has_admin_pin(self) -> bool:
        return bool(await self._storage.get_item(ADMIN_PIN_KEY))

    async def set_admin_pin(self, pin: str) -> None:
        """
        Raises:
            ValidationError: PIN is not exactly four digits
        """
        if not isinstance(pin, str) or not _PIN_PATTERN.fullmatch(pin):
            raise ValidationError("PIN must be exactly 4 digits", field="pin")

        await self._storage.set_item(ADMIN_PIN_KEY, pin)
        await self._audit.log_parental_action(AuditEventType.ADMIN_PIN_SET, "Admin PIN set")

    async def authenticate_admin(self, pin: str) -> bool:
        """True only when a PIN is set and matches."""
        stored = await self._storage.get_item(ADMIN_PIN_KEY)
        if stored and stored == pin:
            await self._audit.log_parental_action(
                AuditEventType.ADMIN_PIN_VERIFIED,
                "Admin PIN accepted",
            )
            return True

        await self._audit.log_parental_action(
            AuditEventType.ADMIN_AUTH_FAILED,
            "Admin PIN rejected",
        )
        return False

    async def clear_admin_pin(self) -> None:
        await self._storage.remove_item(ADMIN_PIN_KEY)
        await self._audit.log_parental_action(AuditEventType.ADMIN_PIN_CLEARED, "Admin PIN cleared")

    # =========================================================================
    # User management
    # =========================================================================

    async def reset_user_password(self, user_id: str, emoji_password: Sequence[str]) -> User:
        """Set a new emoji password for a child who forgot theirs."""
        return await self._users.update(user_id, {"emoji_password": list(emoji_password)})

    async def rename_user(self, user_id: str, name: str) -> User:
        return await self._users.update(user_id, {"name": name})

    async def delete_user(self, user_id: str) -> User:
        return await self._users.delete(user_id)

    async def reset_all_data(self) -> None:
        """Remove every key this app owns. Other apps' data is untouched."""
        await self._storage.clear()
        self._users.invalidate_cache()
        await self._audit.log_parental_action(
            AuditEventType.DATA_RESET,
            "All Money Journal data cleared",
        )
