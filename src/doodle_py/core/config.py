"""Runtime configuration for doodle-py.

Engine timings and application settings are plain frozen dataclasses that
can be built from ``DOODLE_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        msg = f"{name} must be a number, got {raw!r}"
        raise ValueError(msg) from exc
    if value <= 0:
        msg = f"{name} must be positive, got {raw!r}"
        raise ValueError(msg)
    return value


def _env_flag(name: str, *, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class EngineTimings:
    """Delays used by room timers, in seconds.

    Attributes:
        word_choice_timeout: How long the drawer has to pick a word.
        tick_interval: Interval between countdown ticks while drawing.
        round_end_delay: Pause between the end of a round and the next one.
        disconnect_grace: How long a disconnected player keeps their seat.
    """

    word_choice_timeout: float = 5.0
    tick_interval: float = 1.0
    round_end_delay: float = 5.0
    disconnect_grace: float = 15.0

    @classmethod
    def from_env(cls) -> EngineTimings:
        """Create timings from environment variables.

        Environment variables:
            DOODLE_WORD_CHOICE_TIMEOUT: Seconds the drawer has to choose.
            DOODLE_TICK_INTERVAL: Seconds between countdown ticks.
            DOODLE_ROUND_END_DELAY: Seconds between rounds.
            DOODLE_DISCONNECT_GRACE: Seconds a disconnected seat is kept.

        Returns:
            EngineTimings configured from environment.

        Raises:
            ValueError: If a variable is set to a non-positive or non-numeric value.
        """
        defaults = cls()
        return cls(
            word_choice_timeout=_env_float("DOODLE_WORD_CHOICE_TIMEOUT", defaults.word_choice_timeout),
            tick_interval=_env_float("DOODLE_TICK_INTERVAL", defaults.tick_interval),
            round_end_delay=_env_float("DOODLE_ROUND_END_DELAY", defaults.round_end_delay),
            disconnect_grace=_env_float("DOODLE_DISCONNECT_GRACE", defaults.disconnect_grace),
        )


@dataclass(frozen=True)
class AppSettings:
    """Application level settings.

    Attributes:
        debug: Enable Litestar debug mode and debug logging.
        json_logs: Render logs as JSON instead of the console renderer.
        words_file: Optional newline-delimited word list added to the word bank.
        timings: Engine timer configuration.
    """

    debug: bool = False
    json_logs: bool = False
    words_file: str | None = None
    timings: EngineTimings = EngineTimings()

    @classmethod
    def from_env(cls) -> AppSettings:
        """Create settings from environment variables.

        Environment variables:
            DOODLE_DEBUG: Set to "true" for debug mode.
            DOODLE_JSON_LOGS: Set to "true" for JSON log output.
            DOODLE_WORDS_FILE: Path to an extra word list.

        Returns:
            AppSettings configured from environment.
        """
        return cls(
            debug=_env_flag("DOODLE_DEBUG"),
            json_logs=_env_flag("DOODLE_JSON_LOGS"),
            words_file=os.environ.get("DOODLE_WORDS_FILE") or None,
            timings=EngineTimings.from_env(),
        )
