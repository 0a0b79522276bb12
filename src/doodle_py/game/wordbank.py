"""Word bank used to offer secret word choices to the drawer."""

from __future__ import annotations

import random
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from doodle_py.game.exceptions import InsufficientWordsError
from doodle_py.game.types import GameMode
from doodle_py.game.word_lists import DEFAULT_WORDS

if TYPE_CHECKING:
    from collections.abc import Iterable

    from doodle_py.game.models import RoomSettings

logger = structlog.get_logger(__name__)

WORD_CHOICE_COUNT = 3


def letter_count(word: str) -> int:
    """Count the letters of a word, ignoring spaces and punctuation."""
    return sum(1 for char in word if char.isalnum())


class WordBank:
    """Static pool of candidate words.

    Supports plain sampling, sampling restricted to a word length and
    sampling of multi-word combinations for combination mode.

    Attributes:
        words: The candidate words, de-duplicated case-insensitively.
    """

    def __init__(self, words: Iterable[str] | None = None, *, rng: random.Random | None = None) -> None:
        """Initialize the word bank.

        Args:
            words: Candidate words. If None, uses the built-in list.
            rng: Random source, mainly for deterministic tests.
        """
        self.words: list[str] = []
        self._rng = rng or random.Random()
        self.add_words(DEFAULT_WORDS if words is None else words)

    def __len__(self) -> int:
        return len(self.words)

    def add_words(self, words: Iterable[str]) -> int:
        """Add words to the pool, skipping blanks and duplicates.

        Args:
            words: Words to add.

        Returns:
            Number of words actually added.
        """
        existing = {w.lower() for w in self.words}
        added = 0
        for raw in words:
            word = " ".join(raw.split()).lower()
            if not word or word in existing:
                continue
            existing.add(word)
            self.words.append(word)
            added += 1
        return added

    def load_words_from_file(self, file_path: str | Path, *, merge: bool = True) -> int:
        """Load words from a text file (one word per line).

        Args:
            file_path: Path to the text file containing words.
            merge: If True, merge with existing words. If False, replace them.

        Returns:
            Number of words added.

        Raises:
            FileNotFoundError: If the file doesn't exist.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Word file not found: {file_path}")

        with path.open(encoding="utf-8") as f:
            words = [line.strip() for line in f if line.strip() and not line.startswith("#")]

        if not merge:
            self.words = []
        added = self.add_words(words)
        logger.info("Loaded words from file", path=str(path), added=added, total=len(self.words))
        return added

    def sample(self, count: int, *, length: int = 0) -> list[str]:
        """Pick distinct random words.

        Args:
            count: Number of words to return.
            length: Only consider words with this many letters (0 = any length).
                Falls back to the whole pool when too few words match.

        Returns:
            List of randomly selected words.

        Raises:
            InsufficientWordsError: If the pool holds fewer than ``count`` words.
        """
        pool = self._pool(count, length)
        if len(pool) < count:
            raise InsufficientWordsError(count, len(pool))
        return self._rng.sample(pool, count)

    def sample_combinations(self, count: int, word_count: int, *, length: int = 0) -> list[str]:
        """Pick ``count`` phrases, each joining ``word_count`` distinct words.

        No word is reused across the returned phrases.

        Raises:
            InsufficientWordsError: If the pool is too small.
        """
        words = self.sample(count * word_count, length=length)
        return [" ".join(words[i : i + word_count]) for i in range(0, len(words), word_count)]

    def word_choices(self, settings: RoomSettings, count: int = WORD_CHOICE_COUNT) -> list[str]:
        """Sample the choices offered to a drawer under the given room settings."""
        if settings.mode == GameMode.COMBINATION:
            return self.sample_combinations(count, settings.word_count, length=settings.word_length)
        return self.sample(count, length=settings.word_length)

    def _pool(self, needed: int, length: int) -> list[str]:
        if length <= 0:
            return self.words
        matching = [w for w in self.words if letter_count(w) == length]
        if len(matching) < needed:
            logger.warning(
                "Not enough words of requested length, using full word list",
                length=length,
                matching=len(matching),
                needed=needed,
            )
            return self.words
        return matching
