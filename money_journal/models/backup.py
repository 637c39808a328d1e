"""
Export/Import Models

The export file is a versioned JSON document. Import validates the
whole document against this exact shape before touching storage.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from money_journal.models.finance import Goal, JournalModel, Transaction, UtcDatetime

EXPORT_FORMAT_VERSION = 1


class ExportedUser(JournalModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    transactions: list[Transaction] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)


class ExportData(JournalModel):
    """A backup of one user's transactions and goals."""

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = EXPORT_FORMAT_VERSION
    exported_at: UtcDatetime
    app_version: str = Field(..., min_length=1)
    user: ExportedUser


class ImportSummary(BaseModel):
    """What a merge added and what it skipped as duplicates."""

    transactions_added: int = Field(default=0, ge=0)
    transactions_skipped: int = Field(default=0, ge=0)
    goals_added: int = Field(default=0, ge=0)
    goals_skipped: int = Field(default=0, ge=0)

    @property
    def total_added(self) -> int:
        return self.transactions_added + self.goals_added

    @property
    def total_skipped(self) -> int:
        return self.transactions_skipped + self.goals_skipped
