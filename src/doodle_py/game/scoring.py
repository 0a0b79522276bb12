"""Point values awarded during a round."""

from __future__ import annotations

BASE_GUESS_POINTS = 200
TIME_BONUS_POINTS = 100
FIRST_GUESS_BONUS = 50
DRAWER_POINTS_POOL = 300
ALL_GUESSED_DRAWER_BONUS = 200
ALL_GUESSED_GUESSER_BONUS = 50


def guesser_points(timer: int, draw_time: int, *, first: bool) -> int:
    """Points for a correct guess.

    Args:
        timer: Seconds left on the round clock.
        draw_time: Configured draw time in seconds.
        first: Whether this is the first correct guess of the round.

    Returns:
        ``200 + floor(timer / draw_time * 100)`` plus 50 for the first guesser.
    """
    time_bonus = max(0, timer) * TIME_BONUS_POINTS // draw_time if draw_time > 0 else 0
    return BASE_GUESS_POINTS + time_bonus + (FIRST_GUESS_BONUS if first else 0)


def drawer_share(guessers_count: int) -> int:
    """Points the drawer earns for one correct guess.

    ``guessers_count`` is the number of connected non-drawers at the moment of
    the guess. The 300 point pool is divided evenly and rounded half up.
    """
    n = max(1, guessers_count)
    return (2 * DRAWER_POINTS_POOL + n) // (2 * n)
