"""
User Repository

Owns the single source of truth: the ``users`` key, a JSON array of
User records with their transactions and goals embedded.

DESIGN DECISION: The User record is the unit of consistency.
- Every write loads the full collection, changes one record, then
  validates and stores the whole collection again
- All writes run under one asyncio.Lock, so two un-awaited writes to
  the same user can no longer overwrite each other
- Transaction and Goal repositories write only through apply_to_user

CRITICAL: Corrupt stored data is an error. We never replace unreadable
users with an empty list, since the next write would erase them.
"""

import asyncio
import json
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

from money_journal.audit.logger import AuditLogger, get_logger
from money_journal.models.finance import (
    Goal,
    Transaction,
    User,
    UserInput,
    UserUpdate,
    new_id,
)
from money_journal.repositories.cache import Cache, TTLCache
from money_journal.repositories.errors import ConflictError, NotFoundError
from money_journal.services.storage.interface import StorageError, StorageInterface
from money_journal.validation.validator import (
    ValidationError,
    serialize_array,
    validate,
    validate_array,
)


logger = get_logger(__name__)

USERS_KEY = "users"
CURRENT_USER_KEY = "current-user-id"

T = TypeVar("T")


class UserRepository:
    """CRUD, authentication and the current-user pointer."""

    def __init__(
        self,
        storage: StorageInterface,
        cache: Optional[Cache] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._cache = cache if cache is not None else TTLCache()
        self._audit = audit_logger or AuditLogger()
        self._write_lock = asyncio.Lock()

    @property
    def storage(self) -> StorageInterface:
        return self._storage

    def invalidate_cache(self) -> None:
        self._cache.invalidate()

    # =========================================================================
    # Internal load / save
    # =========================================================================

    async def _load_users(self) -> list[User]:
        """Read the collection (through the cache). Returns private copies."""
        cached = self._cache.get()
        if cached is None:
            cached = await self._read_users_from_storage()
            self._cache.set(cached)
        return [user.model_copy(deep=True) for user in cached]

    async def _read_users_from_storage(self) -> list[User]:
        raw = await self._storage.get_item(USERS_KEY)
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            await self._audit.log_error("UsersDataCorrupt", str(e), {"key": USERS_KEY})
            raise StorageError("Stored user data is not valid JSON") from e

        if not isinstance(parsed, list):
            await self._audit.log_error(
                "UsersDataCorrupt",
                f"expected array, got {type(parsed).__name__}",
                {"key": USERS_KEY},
            )
            raise StorageError("Stored user data must be an array of users")

        try:
            return validate_array(User, parsed, "Invalid user data")
        except ValidationError as e:
            await self._audit.log_error(
                "UsersDataInvalid",
                e.message,
                {"key": USERS_KEY, "field": e.field},
            )
            raise

    async def _save_users(self, users: Sequence[User]) -> None:
        """
        Validate the full collection and write it.

        Must be called with the write lock held.
        """
        payload = serialize_array(users)
        validated = validate_array(User, payload, "Invalid user data")

        seen_ids = set()
        for index, user in enumerate(validated):
            if user.id in seen_ids:
                raise ValidationError(
                    f"Invalid user data at index {index}: duplicate user id",
                    field=f"[{index}].id",
                )
            seen_ids.add(user.id)

        try:
            await self._storage.set_item(USERS_KEY, json.dumps(payload, ensure_ascii=False))
        except StorageError as e:
            await self._audit.log_storage_error("save_users", str(e), key=USERS_KEY)
            raise
        finally:
            self._cache.invalidate()

    @staticmethod
    def _index_of(users: Sequence[User], user_id: str) -> int:
        for index, user in enumerate(users):
            if user.id == user_id:
                return index
        raise NotFoundError(f'User with ID "{user_id}" not found')

    @staticmethod
    def _ensure_unique_name(
        users: Sequence[User],
        name: str,
        exclude_id: Optional[str] = None,
    ) -> None:
        folded = name.casefold()
        for user in users:
            if user.id != exclude_id and user.name.casefold() == folded:
                raise ConflictError(f'User with name "{name}" already exists')

    # =========================================================================
    # Queries
    # =========================================================================

    async def find_by_id(self, user_id: str) -> Optional[User]:
        for user in await self._load_users():
            if user.id == user_id:
                return user
        return None

    async def find_all(self) -> list[User]:
        return await self._load_users()

    # =========================================================================
    # Commands
    # =========================================================================

    async def create(self, data: Union[UserInput, dict]) -> User:
        """
        Create a user and make them the current user.

        Raises:
            ValidationError: Name or password fails the schema
            ConflictError: Name already taken (case-insensitive)
        """
        user_input = validate(UserInput, data, "Invalid user input")

        async with self._write_lock:
            users = await self._load_users()
            self._ensure_unique_name(users, user_input.name)

            user = validate(
                User,
                {
                    "id": new_id("user"),
                    "name": user_input.name,
                    "emoji_password": list(user_input.emoji_password),
                },
                "Failed to create valid user",
            )
            users.append(user)
            await self._save_users(users)

        await self._audit.log_user_created(user.id, user.name)
        await self.set_current_user_id(user.id)

        logger.info("user_created", user_id=user.id)
        return user

    async def update(self, user_id: str, updates: Union[UserUpdate, dict]) -> User:
        """
        Change a user's name and/or emoji password.

        Raises:
            ValidationError: The merged record is invalid
            NotFoundError: Unknown user id
            ConflictError: New name clashes with another user
        """
        changes = validate(UserUpdate, updates, "Invalid user update")
        fields = changes.model_dump(exclude_unset=True, exclude_none=True)

        async with self._write_lock:
            users = await self._load_users()
            index = self._index_of(users, user_id)

            if "name" in fields:
                self._ensure_unique_name(users, fields["name"], exclude_id=user_id)

            merged = validate(
                User,
                users[index].model_copy(update=fields).model_dump(),
                "Invalid user update",
            )
            users[index] = merged
            await self._save_users(users)

        await self._audit.log_user_updated(user_id, sorted(fields))
        return merged

    async def delete(self, user_id: str) -> User:
        """
        Delete a user with all their transactions and goals.

        Logs out the current user if it was this one.
        Returns the removed record.

        Raises:
            NotFoundError: Unknown user id
        """
        async with self._write_lock:
            users = await self._load_users()
            index = self._index_of(users, user_id)
            removed = users.pop(index)
            await self._save_users(users)

        if await self.get_current_user_id() == user_id:
            await self.clear_current_user_id()

        await self._audit.log_user_deleted(
            user_id,
            transactions_removed=len(removed.transactions),
            goals_removed=len(removed.goals),
        )
        return removed

    async def authenticate(self, user_id: str, emoji_password: Sequence[str]) -> bool:
        """
        Check an emoji password.

        True only for the same symbols in the same order. Unknown users
        get False; a wrong password is never an exception.
        """
        user = await self.find_by_id(user_id)
        if user is None:
            return False

        succeeded = user.matches_password(list(emoji_password))
        await self._audit.log_login_attempt(user_id, succeeded)
        return succeeded

    # =========================================================================
    # Current user pointer
    # =========================================================================

    async def get_current_user_id(self) -> Optional[str]:
        """The active user id. Stored as a JSON string or a plain one."""
        raw = await self._storage.get_item(CURRENT_USER_KEY)
        if not raw:
            return None
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            return raw
        return parsed if isinstance(parsed, str) and parsed else raw

    async def get_current_user(self) -> Optional[User]:
        user_id = await self.get_current_user_id()
        if user_id is None:
            return None
        return await self.find_by_id(user_id)

    async def set_current_user_id(self, user_id: str) -> None:
        """
        Raises:
            NotFoundError: Unknown user id
        """
        if await self.find_by_id(user_id) is None:
            raise NotFoundError(f'Cannot set current user: User with ID "{user_id}" not found')

        await self._storage.set_item(CURRENT_USER_KEY, json.dumps(user_id))
        await self._audit.log_current_user_changed(user_id)

    async def clear_current_user_id(self) -> None:
        """Log out. Always succeeds."""
        await self._storage.remove_item(CURRENT_USER_KEY)
        await self._audit.log_current_user_changed(None)

    # =========================================================================
    # Internal mutators for the Transaction / Goal repositories
    # =========================================================================

    async def apply_to_user(self, user_id: str, mutation: Callable[[User], T]) -> T:
        """
        Read-modify-validate-write one user record atomically.

        ``mutation`` receives a private copy of the user and may change
        it in place. Its return value is passed back to the caller.
        If it raises, nothing is written.

        Raises:
            NotFoundError: Unknown user id (or raised by the mutation)
            ValidationError: The mutated record is invalid
        """
        async with self._write_lock:
            users = await self._load_users()
            index = self._index_of(users, user_id)
            user = users[index]

            result = mutation(user)

            users[index] = validate(
                User,
                user.model_dump(),
                f'Invalid user data for user "{user_id}"',
            )
            await self._save_users(users)
            return result

    async def update_user_transactions(
        self,
        user_id: str,
        transactions: Sequence[Union[Transaction, dict[str, Any]]],
    ) -> None:
        """Replace a user's whole transaction list."""
        validated = validate_array(Transaction, list(transactions), "Invalid transaction data")

        def replace(user: User) -> None:
            user.transactions = validated

        await self.apply_to_user(user_id, replace)

    async def update_user_goals(
        self,
        user_id: str,
        goals: Sequence[Union[Goal, dict[str, Any]]],
    ) -> None:
        """Replace a user's whole goal list."""
        validated = validate_array(Goal, list(goals), "Invalid goal data")

        def replace(user: User) -> None:
            user.goals = validated

        await self.apply_to_user(user_id, replace)
