"""
Transaction Repository

Transactions live inside their owner's User record, newest first.
This repository never touches storage directly: reads go through
UserRepository.find_*, writes through UserRepository.apply_to_user.

A transaction id alone does not say who owns it, so lookups by id scan
every user. That is fine at family scale (thousands of records).
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from money_journal.audit.logger import AuditLogger
from money_journal.models.audit import AuditEventType
from money_journal.models.finance import (
    Transaction,
    TransactionInput,
    TransactionLocation,
    TransactionType,
    TransactionUpdate,
    User,
    ensure_utc,
    new_id,
    utc_now,
)
from money_journal.repositories.errors import NotFoundError
from money_journal.repositories.user_repository import UserRepository
from money_journal.validation.validator import validate


def _not_found(transaction_id: str) -> NotFoundError:
    return NotFoundError(f'Transaction with ID "{transaction_id}" not found')


def _index_in(user: User, transaction_id: str) -> int:
    for index, transaction in enumerate(user.transactions):
        if transaction.id == transaction_id:
            return index
    raise _not_found(transaction_id)


class TransactionRepository:
    """Transaction queries, writes and balance calculations."""

    def __init__(
        self,
        user_repository: UserRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._users = user_repository
        self._audit = audit_logger or AuditLogger()

    async def _user_transactions(self, user_id: str) -> list[Transaction]:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f'User with ID "{user_id}" not found')
        return user.transactions

    async def _find_owner_id(self, transaction_id: str) -> str:
        for user in await self._users.find_all():
            if any(t.id == transaction_id for t in user.transactions):
                return user.id
        raise _not_found(transaction_id)

    # =========================================================================
    # Queries
    # =========================================================================

    async def find_by_id(self, transaction_id: str) -> Optional[Transaction]:
        for user in await self._users.find_all():
            for transaction in user.transactions:
                if transaction.id == transaction_id:
                    return transaction
        return None

    async def find_all(self) -> list[Transaction]:
        return [t for user in await self._users.find_all() for t in user.transactions]

    async def find_by_user_id(self, user_id: str) -> list[Transaction]:
        return await self._user_transactions(user_id)

    async def find_by_location(
        self,
        user_id: str,
        location: Union[TransactionLocation, str],
    ) -> list[Transaction]:
        return [t for t in await self._user_transactions(user_id) if t.location == location]

    async def find_by_type(
        self,
        user_id: str,
        transaction_type: Union[TransactionType, str],
    ) -> list[Transaction]:
        return [t for t in await self._user_transactions(user_id) if t.type == transaction_type]

    async def find_by_date_range(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> list[Transaction]:
        """Transactions with start <= date <= end (naive bounds are UTC)."""
        start, end = ensure_utc(start), ensure_utc(end)
        return [t for t in await self._user_transactions(user_id) if start <= t.date <= end]

    # =========================================================================
    # Commands
    # =========================================================================

    async def create(
        self,
        user_id: str,
        data: Union[TransactionInput, dict],
    ) -> Transaction:
        """
        Record a transaction at the front of the user's list.

        Raises:
            ValidationError: Input fails the schema
            NotFoundError: Unknown user id
        """
        transaction_input = validate(TransactionInput, data, "Invalid transaction input")
        fields = transaction_input.model_dump(exclude={"date"})
        transaction = validate(
            Transaction,
            {
                **fields,
                "id": new_id("txn"),
                "date": transaction_input.date or utc_now(),
            },
            "Failed to create valid transaction",
        )

        def prepend(user: User) -> None:
            user.transactions.insert(0, transaction)

        await self._users.apply_to_user(user_id, prepend)
        await self._audit.log_transaction_event(
            AuditEventType.TRANSACTION_CREATED,
            user_id,
            transaction.id,
            details={
                "amount": str(transaction.amount),
                "type": transaction.type.value,
                "location": transaction.location.value,
            },
        )
        return transaction

    async def update(
        self,
        transaction_id: str,
        updates: Union[TransactionUpdate, dict],
    ) -> Transaction:
        """
        Change fields of a transaction. The id never changes.

        Raises:
            ValidationError: Update or merged transaction is invalid
            NotFoundError: No user holds this transaction
        """
        changes = validate(TransactionUpdate, updates, "Invalid transaction update")
        fields = changes.model_dump(exclude_unset=True)
        owner_id = await self._find_owner_id(transaction_id)

        def merge(user: User) -> Transaction:
            index = _index_in(user, transaction_id)
            merged = validate(
                Transaction,
                {**user.transactions[index].model_dump(), **fields, "id": transaction_id},
                "Invalid transaction update",
            )
            user.transactions[index] = merged
            return merged

        updated = await self._users.apply_to_user(owner_id, merge)
        await self._audit.log_transaction_event(
            AuditEventType.TRANSACTION_UPDATED,
            owner_id,
            transaction_id,
            details={"fields": sorted(fields)},
        )
        return updated

    async def delete(self, transaction_id: str) -> None:
        """
        Raises:
            NotFoundError: No user holds this transaction
        """
        owner_id = await self._find_owner_id(transaction_id)

        def remove(user: User) -> None:
            del user.transactions[_index_in(user, transaction_id)]

        await self._users.apply_to_user(owner_id, remove)
        await self._audit.log_transaction_event(
            AuditEventType.TRANSACTION_DELETED,
            owner_id,
            transaction_id,
        )

    async def delete_by_user_id(self, user_id: str) -> int:
        """Remove every transaction of a user. Returns how many were removed."""

        def remove_all(user: User) -> int:
            count = len(user.transactions)
            user.transactions = []
            return count

        count = await self._users.apply_to_user(user_id, remove_all)
        await self._audit.log_transaction_event(
            AuditEventType.TRANSACTION_DELETED,
            user_id,
            "*",
            details={"count": count},
        )
        return count

    # =========================================================================
    # Balances
    # =========================================================================

    async def calculate_balance(self, user_id: str) -> Decimal:
        """Sum of income minus sum of expenses."""
        transactions = await self._user_transactions(user_id)
        return sum((t.signed_amount for t in transactions), Decimal("0"))

    async def calculate_balance_by_location(self, user_id: str) -> dict[str, Decimal]:
        """Balance per location. Every location is present, zero if unused."""
        balances = {location.value: Decimal("0") for location in TransactionLocation}
        for transaction in await self._user_transactions(user_id):
            balances[transaction.location.value] += transaction.signed_amount
        return balances

    async def count_for_user(self, user_id: str) -> int:
        return len(await self._user_transactions(user_id))
