"""Exception hierarchy for commit-counter."""

from typing import Any


class CommitCounterError(Exception):
    """Base exception for commit-counter errors."""


class UnknownPlatformError(CommitCounterError):
    """Raised when no platform strategy is registered under a name."""


class PaginationLimitError(CommitCounterError):
    """Raised when a listing endpoint keeps returning full pages past the page limit."""

    def __init__(self, message: str, items: list[Any], pages: int) -> None:
        super().__init__(message)
        self.items = items
        self.pages = pages
