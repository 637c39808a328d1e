"""
Repositories Package

Data access for users, transactions and goals. Only UserRepository
touches storage; the other two write through it.
"""

from money_journal.repositories.cache import (
    DEFAULT_CACHE_TTL_SECONDS,
    Cache,
    NoOpCache,
    TTLCache,
)
from money_journal.repositories.errors import ConflictError, NotFoundError
from money_journal.repositories.user_repository import (
    CURRENT_USER_KEY,
    USERS_KEY,
    UserRepository,
)
from money_journal.repositories.transaction_repository import TransactionRepository
from money_journal.repositories.goal_repository import GoalRepository

__all__ = [
    # Cache
    "DEFAULT_CACHE_TTL_SECONDS",
    "Cache",
    "NoOpCache",
    "TTLCache",
    # Errors
    "ConflictError",
    "NotFoundError",
    # Repositories
    "CURRENT_USER_KEY",
    "USERS_KEY",
    "GoalRepository",
    "TransactionRepository",
    "UserRepository",
]
