"""
Learning Service

Stateful wrapper around the pure selector: loads and saves each user's
UserProgress, tracks the first-use date, and feeds balance and
transaction count from the Transaction repository.

Storage keys:
- ``learning-progress:<user_id>``: JSON UserProgress, one per user
- ``first-use-date``: epoch milliseconds, written once
"""

import json
import random
from decimal import Decimal
from typing import Any, Callable, Optional, Union

from money_journal.audit.logger import AuditLogger, get_logger
from money_journal.config import LearningSettings
from money_journal.learning import selector
from money_journal.learning.catalog import LearningCatalog, get_catalog
from money_journal.models.audit import AuditEventType
from money_journal.models.learning import LearningCard, LearningStats, UserProgress
from money_journal.repositories.errors import NotFoundError
from money_journal.repositories.transaction_repository import TransactionRepository
from money_journal.services.storage.interface import StorageInterface
from money_journal.validation.validator import ValidationError, serialize, validate


logger = get_logger(__name__)

PROGRESS_KEY_PREFIX = "learning-progress:"
FIRST_USE_KEY = "first-use-date"


def progress_key(user_id: str) -> str:
    return f"{PROGRESS_KEY_PREFIX}{user_id}"


class LearningService:
    """Per-user learning progress, persisted in the key-value store."""

    def __init__(
        self,
        storage: StorageInterface,
        transaction_repository: TransactionRepository,
        settings: Optional[LearningSettings] = None,
        catalog: Optional[LearningCatalog] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], int] = selector.current_time_ms,
        rng: Optional[random.Random] = None,
    ):
        self._storage = storage
        self._transactions = transaction_repository
        self._settings = settings or LearningSettings()
        self._catalog = catalog or get_catalog()
        self._audit = audit_logger or AuditLogger()
        self._clock = clock
        self._rng = rng

    @property
    def catalog(self) -> LearningCatalog:
        return self._catalog

    # =========================================================================
    # Persistence
    # =========================================================================

    async def load_progress(self, user_id: str) -> UserProgress:
        """Stored progress, or a fresh record if missing or unreadable."""
        raw = await self._storage.get_item(progress_key(user_id))
        if not raw:
            return selector.initialize_user_progress(self._clock())

        try:
            return validate(UserProgress, json.loads(raw), "Invalid learning progress")
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("learning_progress_unreadable", user_id=user_id, error=str(e))
            return selector.initialize_user_progress(self._clock())

    async def save_progress(self, user_id: str, progress: UserProgress) -> None:
        await self._storage.set_item(
            progress_key(user_id),
            json.dumps(serialize(progress), ensure_ascii=False),
        )

    async def reset_progress(self, user_id: str) -> None:
        await self._storage.remove_item(progress_key(user_id))

    async def days_since_first_use(self) -> int:
        """Whole days since the app was first used. The first call starts the clock."""
        now_ms = self._clock()
        raw = await self._storage.get_item(FIRST_USE_KEY)
        try:
            first_use_ms = int(raw) if raw else None
        except ValueError:
            logger.warning("first_use_date_unreadable", value=raw)
            first_use_ms = None

        if first_use_ms is None:
            await self._storage.set_item(FIRST_USE_KEY, str(now_ms))
            return 0
        return max(0, (now_ms - first_use_ms) // selector.MS_PER_DAY)

    # =========================================================================
    # Card flow
    # =========================================================================

    async def get_next_card(
        self,
        user_id: str,
        total_balance: Union[Decimal, int, float],
        transaction_count: int,
    ) -> Optional[LearningCard]:
        """
        Select the next card and record it as shown.

        The stored level is synced first, stamping the unlock time when
        it changes. Returns None when nothing should be shown now.
        """
        now_ms = self._clock()
        days = await self.days_since_first_use()
        progress = await self.load_progress(user_id)

        level = selector.calculate_user_level(total_balance, transaction_count, days)
        synced = selector.update_level(progress, level, now_ms)

        card = selector.get_next_card(
            synced,
            total_balance,
            transaction_count,
            days,
            now_ms=now_ms,
            rng=self._rng,
            catalog=self._catalog,
            min_hours_between_cards=self._settings.min_hours_between_cards,
            dismissal_retry_days=self._settings.dismissal_retry_days,
        )

        if card is not None:
            synced = selector.mark_card_as_shown(synced, card.id, now_ms)
            await self._audit.log_learning_interaction(
                AuditEventType.LEARNING_CARD_SHOWN,
                user_id,
                card.id,
                details={"level": level},
            )

        if card is not None or synced is not progress:
            await self.save_progress(user_id, synced)
        return card

    async def next_card_for_user(self, user_id: str) -> Optional[LearningCard]:
        """get_next_card fed with the user's current balance and transaction count."""
        balance = await self._transactions.calculate_balance(user_id)
        count = await self._transactions.count_for_user(user_id)
        return await self.get_next_card(user_id, balance, count)

    def _require_card(self, card_id: str) -> LearningCard:
        card = self._catalog.get_card(card_id)
        if card is None:
            raise NotFoundError(f'Learning card "{card_id}" not found')
        return card

    async def acknowledge(
        self,
        user_id: str,
        card_id: str,
        response: Any = None,
    ) -> UserProgress:
        """Record that the child engaged with a card, with their answer."""
        card = self._require_card(card_id)
        progress = selector.mark_card_as_acknowledged(
            await self.load_progress(user_id),
            card_id,
            card.interaction_type.value,
            response,
            self._clock(),
        )
        await self.save_progress(user_id, progress)
        await self._audit.log_learning_interaction(
            AuditEventType.LEARNING_CARD_ACKNOWLEDGED,
            user_id,
            card_id,
            details={"interaction_type": card.interaction_type.value},
        )
        return progress

    async def dismiss(self, user_id: str, card_id: str) -> UserProgress:
        """Record a dismissal; an alternate format may come back later."""
        self._require_card(card_id)
        progress = selector.mark_card_as_dismissed(
            await self.load_progress(user_id),
            card_id,
            self._clock(),
        )
        await self.save_progress(user_id, progress)
        await self._audit.log_learning_interaction(
            AuditEventType.LEARNING_CARD_DISMISSED,
            user_id,
            card_id,
        )
        return progress

    async def get_stats(self, user_id: str) -> LearningStats:
        progress = await self.load_progress(user_id)
        return LearningStats(
            cards_shown=len(progress.seen_card_ids),
            cards_acknowledged=len(progress.acknowledged_card_ids),
            cards_dismissed=len(progress.dismissed_card_ids),
            current_level=progress.current_level,
        )
