"""
Core Data Models for Money Journal

These models define the strict schemas for everything persisted by the
repositories. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages with a field path
3. Serialize to the camelCase wire format used in storage and export files
4. Round-trip: validating a serialized model gives back an equal model

DESIGN DECISION: Money is a finite Decimal of any precision. Older data
may carry float artifacts such as 0.30000000000000004, so no rounding
is applied on read. It is written to JSON as a number so stored data
stays readable, and read back as a Decimal so balances never accumulate
further float error.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Generate a unique, prefixed identifier (e.g. ``txn_1f0c...``)."""
    return f"{prefix}_{uuid4().hex}"


def ensure_utc(value: datetime) -> datetime:
    # Naive timestamps are read as UTC so date-range comparisons never mix
    # naive and aware values.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]

Money = Annotated[
    Decimal,
    Field(allow_inf_nan=False),
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]


class JournalModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class TransactionLocation(str, Enum):
    """
    Where the money physically sits.

    Balances are reported for every location, even empty ones.
    """
    WALLET = "wallet"
    BANK = "bank"
    JAR = "jar"
    OTHER = "other"


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionBase(JournalModel):
    """Fields shared by stored transactions and creation input."""

    amount: Money = Field(
        ...,
        gt=0,
        description="Amount of money moved (always positive)"
    )
    type: TransactionType = Field(
        ...,
        description="Income adds to the balance, expense subtracts"
    )
    location: TransactionLocation = Field(
        ...,
        description="Where the money went to or came from"
    )
    note: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Short note written by the child"
    )
    category: Optional[str] = Field(
        default=None,
        description="Free-form category label"
    )


class TransactionInput(TransactionBase):
    """Input for creating a transaction. The date defaults to now."""

    date: Optional[UtcDatetime] = Field(
        default=None,
        description="When it happened (ISO-8601); defaults to creation time"
    )


class Transaction(TransactionBase):
    """
    A stored transaction.

    Owned by exactly one User and kept inside that user's
    ``transactions`` list, newest first.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique transaction ID"
    )
    date: UtcDatetime = Field(
        ...,
        description="When it happened (ISO-8601)"
    )

    @property
    def signed_amount(self) -> Decimal:
        """Contribution of this transaction to a balance."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class TransactionUpdate(JournalModel):
    """Partial update of a transaction. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    amount: Optional[Money] = Field(default=None, gt=0)
    type: Optional[TransactionType] = None
    location: Optional[TransactionLocation] = None
    note: Optional[str] = Field(default=None, max_length=200)
    date: Optional[UtcDatetime] = None
    category: Optional[str] = None


# =============================================================================
# GOALS
# =============================================================================

class GoalInput(JournalModel):
    """Input for creating a savings goal."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="What the child is saving for"
    )
    target_amount: Money = Field(
        ...,
        gt=0,
        description="Amount needed to complete the goal"
    )
    current_amount: Money = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount saved so far (may exceed the target)"
    )
    color: str = Field(
        ...,
        min_length=1,
        description="Display color chosen by the child"
    )
    emoji: Optional[str] = None
    note: Optional[str] = None


class Goal(GoalInput):
    """
    A stored savings goal.

    There is no cap on current_amount: overshooting the target is
    valid data, clamping is a display concern.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique goal ID"
    )

    @property
    def is_completed(self) -> bool:
        return self.current_amount >= self.target_amount

    @property
    def remaining_amount(self) -> Decimal:
        return max(self.target_amount - self.current_amount, Decimal("0"))


class GoalUpdate(JournalModel):
    """Partial update of a goal. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    target_amount: Optional[Money] = Field(default=None, gt=0)
    current_amount: Optional[Money] = Field(default=None, ge=0)
    color: Optional[str] = Field(default=None, min_length=1)
    emoji: Optional[str] = None
    note: Optional[str] = None


# =============================================================================
# USERS
# =============================================================================

EmojiSymbol = Annotated[str, Field(min_length=1)]

EmojiPassword = Annotated[
    list[EmojiSymbol],
    Field(min_length=3, max_length=6),
]


class UserInput(JournalModel):
    """Input for creating a user."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Display name, unique case-insensitively"
    )
    emoji_password: EmojiPassword = Field(
        ...,
        description="Ordered sequence of 3 to 6 emoji"
    )


class UserUpdate(JournalModel):
    """Fields a user (or parent) may change."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    emoji_password: Optional[EmojiPassword] = None


class User(JournalModel):
    """
    A child's account, with their transactions and goals embedded.

    CRITICAL: This whole record is the unit of storage. Any change to a
    transaction or goal rewrites and revalidates the full record.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique user ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Display name"
    )
    emoji_password: EmojiPassword
    transactions: list[Transaction] = Field(
        default_factory=list,
        description="Newest first"
    )
    goals: list[Goal] = Field(default_factory=list)
    created_at: UtcDatetime = Field(
        default_factory=utc_now,
        description="When the account was created"
    )

    @model_validator(mode='after')
    def validate_unique_children(self) -> 'User':
        """Embedded ids must be unique within the user."""
        txn_ids = [t.id for t in self.transactions]
        if len(txn_ids) != len(set(txn_ids)):
            raise ValueError("Transaction ids must be unique within a user")

        goal_ids = [g.id for g in self.goals]
        if len(goal_ids) != len(set(goal_ids)):
            raise ValueError("Goal ids must be unique within a user")

        return self

    def matches_password(self, candidate: list[str]) -> bool:
        """Same length, same symbols, same order."""
        return list(candidate) == list(self.emoji_password)
