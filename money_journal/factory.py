"""
Repository Factory

DESIGN DECISION: One explicit container, built once at application
start and passed down, instead of a hidden global singleton.
- Every component is created lazily on first access
- Transaction and Goal repositories share the one User repository
- ``reset()`` and ``set_storage()`` are the hooks tests use for isolation

Anything wired to the storage adapter (repositories, services) is
discarded together when the adapter changes.
"""

import random
from typing import Callable, Optional

from money_journal.audit.logger import AuditLogger, get_logger
from money_journal.config import Settings, get_settings
from money_journal.learning.selector import current_time_ms
from money_journal.learning.service import LearningService
from money_journal.repositories.cache import TTLCache
from money_journal.repositories.goal_repository import GoalRepository
from money_journal.repositories.transaction_repository import TransactionRepository
from money_journal.repositories.user_repository import UserRepository
from money_journal.services.backup import BackupService
from money_journal.services.parental import ParentalControls
from money_journal.services.storage import StorageInterface, create_storage


logger = get_logger(__name__)


class RepositoryFactory:
    """Builds and holds one instance of each repository and service."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[StorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], int] = current_time_ms,
        rng: Optional[random.Random] = None,
    ):
        self._settings = settings or get_settings()
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._clock = clock
        self._rng = rng
        self._clear_components()

    def _clear_components(self) -> None:
        self._user_repository: Optional[UserRepository] = None
        self._transaction_repository: Optional[TransactionRepository] = None
        self._goal_repository: Optional[GoalRepository] = None
        self._learning_service: Optional[LearningService] = None
        self._backup_service: Optional[BackupService] = None
        self._parental_controls: Optional[ParentalControls] = None

    def reset(self) -> None:
        """Discard every instance, the storage adapter included."""
        self._storage = None
        self._clear_components()

    def set_storage(self, storage: StorageInterface) -> None:
        """Swap the storage adapter and drop everything built on the old one."""
        self._storage = storage
        self._clear_components()
        logger.info("storage_swapped", adapter=type(storage).__name__)

    def get_storage(self) -> StorageInterface:
        if self._storage is None:
            self._storage = create_storage(self._settings)
            logger.info("storage_created", adapter=type(self._storage).__name__)
        return self._storage

    def get_user_repository(self) -> UserRepository:
        if self._user_repository is None:
            self._user_repository = UserRepository(
                self.get_storage(),
                cache=TTLCache(self._settings.app.user_cache_ttl_seconds),
                audit_logger=self._audit,
            )
        return self._user_repository

    def get_transaction_repository(self) -> TransactionRepository:
        if self._transaction_repository is None:
            self._transaction_repository = TransactionRepository(
                self.get_user_repository(),
                audit_logger=self._audit,
            )
        return self._transaction_repository

    def get_goal_repository(self) -> GoalRepository:
        if self._goal_repository is None:
            self._goal_repository = GoalRepository(
                self.get_user_repository(),
                audit_logger=self._audit,
            )
        return self._goal_repository

    def get_learning_service(self) -> LearningService:
        if self._learning_service is None:
            self._learning_service = LearningService(
                self.get_storage(),
                self.get_transaction_repository(),
                settings=self._settings.learning,
                audit_logger=self._audit,
                clock=self._clock,
                rng=self._rng,
            )
        return self._learning_service

    def get_backup_service(self) -> BackupService:
        if self._backup_service is None:
            self._backup_service = BackupService(
                self.get_user_repository(),
                app_version=self._settings.app.app_version,
                audit_logger=self._audit,
            )
        return self._backup_service

    def get_parental_controls(self) -> ParentalControls:
        if self._parental_controls is None:
            self._parental_controls = ParentalControls(
                self.get_storage(),
                self.get_user_repository(),
                audit_logger=self._audit,
            )
        return self._parental_controls


def create_repository_factory(storage: Optional[StorageInterface] = None) -> RepositoryFactory:
    """
    Factory function to create the application container.

    Args:
        storage: Adapter to use. Built from settings when omitted.
    """
    return RepositoryFactory(settings=get_settings(), storage=storage)
