"""
Tests for export/import of a user's data.
"""

import asyncio
import json
from datetime import date, datetime, timezone

import pytest

from conftest import SAM_PASSWORD
from money_journal.models.audit import AuditEventType
from money_journal.repositories import USERS_KEY, NotFoundError
from money_journal.services.backup import (
    BackupService,
    generate_export_filename,
    validate_import_data,
)
from money_journal.validation import ValidationError


EXPORTED_AT = datetime(2024, 3, 5, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def backup(user_repo, audit):
    return BackupService(user_repo, app_version="1.0.0", audit_logger=audit)


async def seeded_user(user_repo, txn_repo, goal_repo, name="Sam"):
    user = await user_repo.create({"name": name, "emoji_password": SAM_PASSWORD})
    await txn_repo.create(user.id, {"amount": 50, "type": "income", "location": "wallet"})
    await txn_repo.create(user.id, {"amount": "12.50", "type": "expense", "location": "wallet"})
    await goal_repo.create(user.id, {"name": "Bike", "target_amount": 100, "color": "blue"})
    return user


class TestFilename:
    """Tests for export file naming."""

    def test_sanitized_name(self):
        """Test non-alphanumerics become dashes and the name is lowercased."""
        name = generate_export_filename("Sam Smith!", today=date(2024, 3, 5))
        assert name == "money-journal-sam-smith--2024-03-05.json"

    def test_non_ascii_replaced(self):
        """Test accented and emoji characters are replaced too."""
        name = generate_export_filename("Zoë🎮", today=date(2024, 1, 2))
        assert name == "money-journal-zo---2024-01-02.json"


class TestExport:
    """Tests for building export documents."""

    def test_export_document(self, user_repo, txn_repo, goal_repo, backup, audit):
        """Test the export holds the version, metadata and the user's data."""
        async def scenario():
            user = await seeded_user(user_repo, txn_repo, goal_repo)
            text = await backup.export_user_json(user.id, now=EXPORTED_AT)
            doc = json.loads(text)

            assert doc["version"] == 1
            assert doc["appVersion"] == "1.0.0"
            assert doc["exportedAt"].startswith("2024-03-05T18:00:00")
            assert doc["user"]["name"] == "Sam"
            assert len(doc["user"]["transactions"]) == 2
            assert doc["user"]["goals"][0]["targetAmount"] == 100
            assert "emojiPassword" not in doc["user"]
            assert AuditEventType.EXPORT_CREATED in audit.types()

        asyncio.run(scenario())

    def test_export_unknown_user(self, backup):
        """Test exporting a missing user raises NotFoundError."""
        async def scenario():
            with pytest.raises(NotFoundError):
                await backup.export_user("user_missing")

        asyncio.run(scenario())


class TestValidateImport:
    """Tests for import file validation."""

    def test_not_json(self):
        """Test non-JSON text is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_import_data("this is not json")
        assert exc_info.value.message.startswith("Invalid import file")

    def test_wrong_version(self):
        """Test only version 1 files are accepted."""
        doc = {
            "version": 2,
            "exportedAt": "2024-03-05T18:00:00Z",
            "appVersion": "1.0.0",
            "user": {"name": "Sam", "transactions": [], "goals": []},
        }
        with pytest.raises(ValidationError) as exc_info:
            validate_import_data(json.dumps(doc))
        assert exc_info.value.field == "version"

    def test_extra_keys_rejected(self):
        """Test the export shape is exact."""
        doc = {
            "version": 1,
            "exportedAt": "2024-03-05T18:00:00Z",
            "appVersion": "1.0.0",
            "user": {"name": "Sam", "transactions": [], "goals": [], "emojiPassword": ["a"]},
        }
        with pytest.raises(ValidationError):
            validate_import_data(json.dumps(doc))


class TestImport:
    """Tests for merging a backup into a user."""

    def test_import_into_other_user(self, user_repo, txn_repo, goal_repo, backup):
        """Test a backup lands in a different user with every item added."""
        async def scenario():
            sam = await seeded_user(user_repo, txn_repo, goal_repo)
            text = await backup.export_user_json(sam.id)
            alex = await user_repo.create({"name": "Alex", "emoji_password": SAM_PASSWORD})

            summary = await backup.import_into_user(alex.id, text)
            assert summary.transactions_added == 2
            assert summary.goals_added == 1
            assert summary.total_skipped == 0
            assert len(await txn_repo.find_by_user_id(alex.id)) == 2
            assert await txn_repo.calculate_balance(alex.id) == await txn_repo.calculate_balance(sam.id)

        asyncio.run(scenario())

    def test_full_overlap_skips_everything(self, user_repo, txn_repo, goal_repo, backup, audit):
        """Test re-importing a user's own backup adds nothing."""
        async def scenario():
            sam = await seeded_user(user_repo, txn_repo, goal_repo)
            text = await backup.export_user_json(sam.id)

            summary = await backup.import_into_user(sam.id, text)
            assert summary.total_added == 0
            assert summary.transactions_skipped == 2
            assert summary.goals_skipped == 1
            assert len(await txn_repo.find_by_user_id(sam.id)) == 2
            assert AuditEventType.IMPORT_COMPLETED in audit.types()

        asyncio.run(scenario())

    def test_repeated_ids_in_file(self, user_repo, backup):
        """Test a file repeating an id only adds it once."""
        async def scenario():
            user = await user_repo.create({"name": "Sam", "emoji_password": SAM_PASSWORD})
            txn = {
                "id": "txn_dup",
                "amount": 1,
                "type": "income",
                "location": "jar",
                "date": "2024-03-01T00:00:00Z",
            }
            doc = {
                "version": 1,
                "exportedAt": "2024-03-05T18:00:00Z",
                "appVersion": "1.0.0",
                "user": {"name": "Sam", "transactions": [txn, txn], "goals": []},
            }
            summary = await backup.import_into_user(user.id, doc)
            assert summary.transactions_added == 1
            assert summary.transactions_skipped == 1

        asyncio.run(scenario())

    def test_invalid_file_writes_nothing(self, user_repo, backup, storage, audit):
        """Test one bad item rejects the whole file atomically."""
        async def scenario():
            user = await user_repo.create({"name": "Sam", "emoji_password": SAM_PASSWORD})
            before = await storage.get_item(USERS_KEY)
            good = {
                "id": "txn_good",
                "amount": 1,
                "type": "income",
                "location": "jar",
                "date": "2024-03-01T00:00:00Z",
            }
            doc = {
                "version": 1,
                "exportedAt": "2024-03-05T18:00:00Z",
                "appVersion": "1.0.0",
                "user": {
                    "name": "Sam",
                    "transactions": [good, {**good, "id": "txn_bad", "amount": -3}],
                    "goals": [],
                },
            }
            with pytest.raises(ValidationError) as exc_info:
                await backup.import_into_user(user.id, json.dumps(doc))
            assert exc_info.value.field == "user.transactions.1.amount"
            assert await storage.get_item(USERS_KEY) == before
            assert AuditEventType.IMPORT_REJECTED in audit.types()

        asyncio.run(scenario())

    def test_import_unknown_user(self, backup):
        """Test importing into a missing user raises NotFoundError."""
        async def scenario():
            doc = {
                "version": 1,
                "exportedAt": "2024-03-05T18:00:00Z",
                "appVersion": "1.0.0",
                "user": {"name": "Sam"},
            }
            with pytest.raises(NotFoundError):
                await backup.import_into_user("user_missing", doc)

        asyncio.run(scenario())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
