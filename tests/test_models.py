"""
Tests for Money Journal models

Test strategy:
1. Unit tests for individual models (field rules, wire format)
2. Repository and service tests use in-memory storage
3. No real network calls in tests
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from money_journal.models.finance import (
    Goal,
    GoalUpdate,
    Transaction,
    TransactionLocation,
    TransactionType,
    TransactionUpdate,
    User,
    UserInput,
)
from money_journal.models.learning import UserProgress
from money_journal.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


def make_transaction(**overrides) -> Transaction:
    data = {
        "id": "txn_1",
        "amount": Decimal("12.50"),
        "type": "income",
        "location": "wallet",
        "date": datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return Transaction(**data)


class TestTransactionModels:
    """Tests for transaction models."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        txn = make_transaction(note="Chores", category="allowance")
        assert txn.amount == Decimal("12.50")
        assert txn.type == TransactionType.INCOME
        assert txn.location == TransactionLocation.WALLET
        assert txn.note == "Chores"

    def test_transaction_rejects_zero_amount(self):
        """Test that amounts must be positive."""
        with pytest.raises(ValueError):
            make_transaction(amount=Decimal("0"))

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            make_transaction(amount=Decimal("-5"))

    def test_transaction_accepts_float_artifact_amount(self):
        """Test that amounts written by float addition are still readable."""
        txn = make_transaction(amount=0.30000000000000004)
        assert txn.amount == Decimal("0.30000000000000004")
        assert txn.model_dump(mode="json", by_alias=True)["amount"] == 0.30000000000000004

    def test_transaction_rejects_non_finite_amount(self):
        """Test that infinity and NaN are not money."""
        with pytest.raises(ValueError):
            make_transaction(amount=Decimal("Infinity"))
        with pytest.raises(ValueError):
            make_transaction(amount=Decimal("NaN"))

    def test_transaction_rejects_unknown_location(self):
        """Test that location comes from the closed set."""
        with pytest.raises(ValueError):
            make_transaction(location="sock drawer")

    def test_transaction_note_length(self):
        """Test the 200 character note limit."""
        make_transaction(note="x" * 200)
        with pytest.raises(ValueError):
            make_transaction(note="x" * 201)

    def test_naive_date_is_utc(self):
        """Test that a naive timestamp is read as UTC."""
        txn = make_transaction(date=datetime(2024, 5, 1, 9, 30))
        assert txn.date.tzinfo is not None
        assert txn.date == datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)

    def test_signed_amount(self):
        """Test income counts up and expense counts down."""
        assert make_transaction(type="income").signed_amount == Decimal("12.50")
        assert make_transaction(type="expense").signed_amount == Decimal("-12.50")

    def test_wire_format_is_camel_case_json(self):
        """Test serialized transactions use numbers and ISO dates."""
        dumped = make_transaction().model_dump(mode="json", by_alias=True)
        assert dumped["amount"] == 12.5
        assert dumped["type"] == "income"
        assert dumped["date"].startswith("2024-05-01T09:30:00")

    def test_update_rejects_unknown_fields(self):
        """Test that partial updates cannot smuggle in extra keys."""
        with pytest.raises(ValueError):
            TransactionUpdate.model_validate({"owner": "someone"})

    def test_update_accepts_partial(self):
        """Test that every update field is optional."""
        update = TransactionUpdate.model_validate({"note": "Snacks"})
        assert update.model_dump(exclude_unset=True) == {"note": "Snacks"}


class TestGoalModels:
    """Tests for goal models."""

    def test_goal_from_camel_case(self):
        """Test goals parse from the stored camelCase form."""
        goal = Goal.model_validate({
            "id": "goal_1",
            "name": "Bike",
            "targetAmount": 100,
            "color": "blue",
        })
        assert goal.target_amount == Decimal("100")
        assert goal.current_amount == Decimal("0")
        assert goal.is_completed is False
        assert goal.remaining_amount == Decimal("100")

    def test_goal_overshoot_is_allowed(self):
        """Test that saving past the target is valid data."""
        goal = Goal(id="g", name="Bike", target_amount=100, current_amount=150, color="red")
        assert goal.is_completed is True
        assert goal.remaining_amount == Decimal("0")

    def test_goal_rejects_zero_target(self):
        """Test that the target must be positive."""
        with pytest.raises(ValueError):
            Goal(id="g", name="Bike", target_amount=0, color="red")

    def test_goal_rejects_long_name(self):
        """Test the 100 character name limit."""
        with pytest.raises(ValueError):
            Goal(id="g", name="x" * 101, target_amount=10, color="red")

    def test_goal_update_rejects_negative_current(self):
        """Test that saved amounts cannot go below zero."""
        with pytest.raises(ValueError):
            GoalUpdate(current_amount=Decimal("-1"))


class TestUserModels:
    """Tests for user models."""

    def test_user_input_strips_name(self):
        """Test that whitespace is stripped from names."""
        user_input = UserInput(name="  Sam  ", emoji_password=["😀", "😎", "🎮"])
        assert user_input.name == "Sam"

    def test_password_length_bounds(self):
        """Test emoji passwords must have 3 to 6 symbols."""
        UserInput(name="Sam", emoji_password=["a", "b", "c"])
        UserInput(name="Sam", emoji_password=list("abcdef"))
        with pytest.raises(ValueError):
            UserInput(name="Sam", emoji_password=["a", "b"])
        with pytest.raises(ValueError):
            UserInput(name="Sam", emoji_password=list("abcdefg"))

    def test_password_symbols_not_empty(self):
        """Test that an empty symbol is rejected."""
        with pytest.raises(ValueError):
            UserInput(name="Sam", emoji_password=["a", "", "c"])

    def test_name_length(self):
        """Test the 50 character name limit."""
        with pytest.raises(ValueError):
            UserInput(name="x" * 51, emoji_password=["a", "b", "c"])

    def test_user_defaults(self):
        """Test a new user has empty collections and a creation time."""
        user = User(id="user_1", name="Sam", emoji_password=["a", "b", "c"])
        assert user.transactions == []
        assert user.goals == []
        assert user.created_at.tzinfo is not None

    def test_user_rejects_duplicate_transaction_ids(self):
        """Test that embedded transaction ids are unique."""
        txn = make_transaction()
        with pytest.raises(ValueError):
            User(id="user_1", name="Sam", emoji_password=["a", "b", "c"], transactions=[txn, txn])

    def test_matches_password_is_order_sensitive(self):
        """Test that only the exact sequence matches."""
        user = User(id="user_1", name="Sam", emoji_password=["a", "b", "c"])
        assert user.matches_password(["a", "b", "c"]) is True
        assert user.matches_password(["c", "b", "a"]) is False
        assert user.matches_password(["a", "b"]) is False
        assert user.matches_password(["a", "b", "c", "d"]) is False

    def test_user_wire_keys(self):
        """Test the stored user uses camelCase keys."""
        user = User(id="user_1", name="Sam", emoji_password=["a", "b", "c"])
        dumped = user.model_dump(mode="json", by_alias=True)
        assert set(dumped) == {"id", "name", "emojiPassword", "transactions", "goals", "createdAt"}


class TestUserProgressModel:
    """Tests for the learning progress record."""

    def test_sets_serialize_sorted(self):
        """Test id sets are written as sorted lists."""
        progress = UserProgress(seen_card_ids={"b", "a", "c"})
        dumped = progress.model_dump(mode="json", by_alias=True)
        assert dumped["seenCardIds"] == ["a", "b", "c"]

    def test_level_dates_keys_round_trip(self):
        """Test JSON string keys come back as integer levels."""
        progress = UserProgress.model_validate({"levelUnlockedDates": {"1": 1000, "2": 2000}})
        assert progress.level_unlocked_dates == {1: 1000, 2: 2000}

    def test_level_bounds(self):
        """Test levels run from 1 to 4."""
        with pytest.raises(ValueError):
            UserProgress(current_level=5)


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.USER_CREATED,
            description="User created",
        )
        assert event.event_type == AuditEventType.USER_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_CREATED,
            description="Transaction created",
            details={"amount": "5.00"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_created"
        assert log_dict["details"]["amount"] == "5.00"

    def test_builder_user_deleted(self):
        """Test AuditEventBuilder.user_deleted."""
        event = AuditEventBuilder.user_deleted("user_1", transactions_removed=3, goals_removed=1)
        assert event.event_type == AuditEventType.USER_DELETED
        assert event.severity == AuditSeverity.WARNING
        assert event.details == {"transactions_removed": 3, "goals_removed": 1}

    def test_builder_login_attempt(self):
        """Test failed logins are warnings and successful ones are not."""
        ok = AuditEventBuilder.login_attempt("user_1", succeeded=True)
        bad = AuditEventBuilder.login_attempt("user_1", succeeded=False)
        assert ok.event_type == AuditEventType.LOGIN_SUCCEEDED
        assert bad.event_type == AuditEventType.LOGIN_FAILED
        assert bad.severity == AuditSeverity.WARNING

    def test_builder_transaction_changed(self):
        """Test the description follows the event type."""
        event = AuditEventBuilder.transaction_changed(
            AuditEventType.TRANSACTION_DELETED, "user_1", "txn_1"
        )
        assert event.entity_type == "transaction"
        assert event.entity_id == "txn_1"
        assert event.description == "Transaction deleted"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
