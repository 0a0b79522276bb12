"""Exception classes for game module."""

from __future__ import annotations

from typing import ClassVar

from doodle_py.exceptions import DoodleError


class WordBankError(DoodleError):
    """Raised when word bank operations fail."""

    code: ClassVar[str] = "word_bank_error"


class InsufficientWordsError(WordBankError):
    """Raised when there aren't enough words available for selection."""

    code: ClassVar[str] = "insufficient_words"

    def __init__(self, requested: int, available: int) -> None:
        """Initialize the exception.

        Args:
            requested: Number of words requested.
            available: Number of words available.
        """
        super().__init__(f"Requested {requested} words but only {available} available")
        self.requested = requested
        self.available = available


class InvalidDrawingActionError(DoodleError):
    """Raised when a drawing action payload cannot be understood."""

    code: ClassVar[str] = "invalid_drawing_action"
