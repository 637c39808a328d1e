"""
Shared fixtures.

Every test runs against in-memory storage; nothing touches the network
or the real data file.
"""

import asyncio

import pytest

from money_journal.audit.logger import AuditLogger
from money_journal.repositories import (
    GoalRepository,
    NoOpCache,
    TransactionRepository,
    UserRepository,
)
from money_journal.services.storage import InMemoryStorage


SAM_PASSWORD = ["😀", "😎", "🎮"]


class FirstChoice:
    """Deterministic stand-in for random: always picks the first candidate."""

    def choice(self, seq):
        return seq[0]


class RecordingAuditLogger(AuditLogger):
    """Keeps every event in memory so tests can assert on the audit trail."""

    def __init__(self):
        super().__init__("money_journal.audit.test")
        self.events = []

    async def log(self, event):
        self.events.append(event)
        return True

    def types(self):
        return [event.event_type for event in self.events]


class YieldingStorage(InMemoryStorage):
    """In-memory storage that yields to the event loop on every call."""

    async def get_item(self, key):
        await asyncio.sleep(0)
        return await super().get_item(key)

    async def set_item(self, key, value):
        await asyncio.sleep(0)
        await super().set_item(key, value)


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def audit():
    return RecordingAuditLogger()


@pytest.fixture
def user_repo(storage, audit):
    return UserRepository(storage, cache=NoOpCache(), audit_logger=audit)


@pytest.fixture
def txn_repo(user_repo, audit):
    return TransactionRepository(user_repo, audit_logger=audit)


@pytest.fixture
def goal_repo(user_repo, audit):
    return GoalRepository(user_repo, audit_logger=audit)
