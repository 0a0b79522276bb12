"""Example usage of the WordBank and hint helpers.

This example demonstrates:
- Creating a WordBank instance
- Sampling word choices for a drawer
- Filtering by word length and combination mode
- Adding custom words
- Revealing hint letters over the course of a round
"""

from __future__ import annotations

import random

from doodle_py.game import GameMode, RoomSettings, WordBank
from doodle_py.game.hints import hints_elapsed, letters_to_reveal, mask_word, reveal


def main() -> None:
    """Demonstrate WordBank functionality."""
    print("=== WordBank Demo ===\n")

    rng = random.Random(7)
    word_bank = WordBank(rng=rng)
    print(f"1. Built-in words available: {len(word_bank)}\n")

    print("2. Word choices with default settings...")
    options = word_bank.word_choices(RoomSettings())
    print(f"   Options: {options}\n")

    print("3. Only five-letter words...")
    print(f"   Options: {word_bank.word_choices(RoomSettings(word_length=5))}\n")

    print("4. Combination mode with two words per choice...")
    combo = RoomSettings(mode=GameMode.COMBINATION, word_count=2)
    print(f"   Options: {word_bank.word_choices(combo)}\n")

    print("5. Adding custom words...")
    added = word_bank.add_words(["Litestar", "  structured   logging ", "litestar"])
    print(f"   Added {added} new words, total {len(word_bank)}\n")

    word = "structured logging"
    draw_time, hints = 80, 2
    revealed: set[int] = set()
    print(f"6. Hints for {word!r} ({hints} hints over {draw_time}s)...")
    for elapsed in (0, 27, 54, 79):
        steps = hints_elapsed(elapsed, draw_time, hints)
        reveal(word, revealed, letters_to_reveal(word, steps), rng)
        print(f"   t={elapsed:>2}s  {mask_word(word, revealed)}")

    print("\n=== Demo Complete ===")


if __name__ == "__main__":
    main()
