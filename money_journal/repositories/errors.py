"""Repository-level exceptions."""

from money_journal.errors import MoneyJournalError


class NotFoundError(MoneyJournalError):
    """A user, transaction or goal id does not exist."""
    pass


class ConflictError(MoneyJournalError):
    """Another user already has this name (compared case-insensitively)."""
    pass
