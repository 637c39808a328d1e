"""Base exception shared by every layer of Money Journal."""


class MoneyJournalError(Exception):
    """Base exception for all Money Journal errors."""
    pass
