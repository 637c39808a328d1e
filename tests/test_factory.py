"""
Tests for the repository factory (application container).
"""

import asyncio

import pytest

from conftest import SAM_PASSWORD, FirstChoice, RecordingAuditLogger
from money_journal.config import get_settings
from money_journal.factory import RepositoryFactory, create_repository_factory
from money_journal.services.storage import InMemoryStorage, JSONFileStorage


@pytest.fixture
def factory():
    return RepositoryFactory(
        storage=InMemoryStorage(),
        audit_logger=RecordingAuditLogger(),
        clock=lambda: 1_700_000_000_000,
        rng=FirstChoice(),
    )


class TestRepositoryFactory:
    """Tests for RepositoryFactory wiring."""

    def test_components_are_singletons(self, factory):
        """Test each getter returns the same instance every time."""
        assert factory.get_user_repository() is factory.get_user_repository()
        assert factory.get_transaction_repository() is factory.get_transaction_repository()
        assert factory.get_goal_repository() is factory.get_goal_repository()
        assert factory.get_learning_service() is factory.get_learning_service()
        assert factory.get_backup_service() is factory.get_backup_service()
        assert factory.get_parental_controls() is factory.get_parental_controls()

    def test_repositories_share_storage(self, factory):
        """Test every component sees the same storage adapter."""
        assert factory.get_user_repository().storage is factory.get_storage()

    def test_end_to_end(self, factory):
        """Test a user, a transaction and a learning card through one container."""
        async def scenario():
            user = await factory.get_user_repository().create(
                {"name": "Sam", "emoji_password": SAM_PASSWORD}
            )
            await factory.get_transaction_repository().create(
                user.id, {"amount": 20, "type": "income", "location": "jar"}
            )
            card = await factory.get_learning_service().next_card_for_user(user.id)
            assert card.id == "celebrate-first-save"

        asyncio.run(scenario())

    def test_set_storage_drops_components(self, factory):
        """Test swapping storage rebuilds everything on top of it."""
        users = factory.get_user_repository()
        replacement = InMemoryStorage(namespace="other_")
        factory.set_storage(replacement)
        assert factory.get_storage() is replacement
        assert factory.get_user_repository() is not users
        assert factory.get_user_repository().storage is replacement

    def test_reset_rebuilds_storage_from_settings(self, monkeypatch):
        """Test reset() discards the adapter and builds a fresh one."""
        monkeypatch.setenv("MONEY_JOURNAL_STORAGE_BACKEND", "memory")
        get_settings.cache_clear()
        try:
            factory = create_repository_factory()
            first = factory.get_storage()
            factory.reset()
            second = factory.get_storage()
            assert isinstance(second, InMemoryStorage)
            assert second is not first
        finally:
            get_settings.cache_clear()

    def test_default_backend_is_file(self, monkeypatch, tmp_path):
        """Test the JSON file adapter is the default."""
        monkeypatch.delenv("MONEY_JOURNAL_STORAGE_BACKEND", raising=False)
        monkeypatch.setenv("MONEY_JOURNAL_STORAGE_FILE_PATH", str(tmp_path / "d.json"))
        get_settings.cache_clear()
        try:
            assert isinstance(create_repository_factory().get_storage(), JSONFileStorage)
        finally:
            get_settings.cache_clear()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
