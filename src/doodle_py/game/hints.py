"""Progressive letter reveal for the secret word.

The draw time is split into ``hints + 1`` equal spans. At the end of each
span one more hint step has elapsed and ``floor(letters * 0.2 * steps)``
letters are visible to guessers. Spaces and punctuation are always shown.
"""

from __future__ import annotations

import random

HINT_REVEAL_PERCENT = 20
MASK_CHAR = "_"


def is_separator(char: str) -> bool:
    """Return True for characters that are shown from the start."""
    return not char.isalnum()


def letter_positions(word: str) -> list[int]:
    """Indices of the hideable letters of ``word``."""
    return [i for i, char in enumerate(word) if not is_separator(char)]


def hints_elapsed(elapsed: int, draw_time: int, hints: int) -> int:
    """Number of hint steps reached after ``elapsed`` seconds of drawing.

    Args:
        elapsed: Seconds since drawing started.
        draw_time: Configured draw time in seconds.
        hints: Configured number of hints.

    Returns:
        A value between 0 and ``hints``.
    """
    if hints <= 0 or draw_time <= 0 or elapsed <= 0:
        return 0
    return min(hints, elapsed * (hints + 1) // draw_time)


def letters_to_reveal(word: str, steps: int) -> int:
    """How many letters should be visible after ``steps`` hint steps."""
    letters = len(letter_positions(word))
    return min(letters, letters * HINT_REVEAL_PERCENT * steps // 100)


def reveal(word: str, revealed: set[int], target: int, rng: random.Random | None = None) -> list[int]:
    """Grow ``revealed`` in place with random letter positions until it holds ``target`` letters.

    Already revealed positions are never removed.

    Returns:
        The newly revealed positions.
    """
    rng = rng or random.Random()
    hidden = [i for i in letter_positions(word) if i not in revealed]
    missing = max(0, min(target - len(revealed), len(hidden)))
    picked = rng.sample(hidden, missing)
    revealed.update(picked)
    return picked


def mask_word(word: str, revealed: set[int]) -> str:
    """Render ``word`` with unrevealed letters replaced by underscores."""
    return "".join(char if is_separator(char) or i in revealed else MASK_CHAR for i, char in enumerate(word))
