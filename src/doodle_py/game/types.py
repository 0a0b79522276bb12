"""Type definitions for the room engine."""

from __future__ import annotations

from enum import StrEnum


class RoundStatus(StrEnum):
    """Phase of a room's round state machine.

    waiting -> choosing_word -> playing -> ended_round -> (choosing_word | ended)
    """

    WAITING = "waiting"
    CHOOSING_WORD = "choosing_word"
    PLAYING = "playing"
    ENDED_ROUND = "ended_round"
    ENDED = "ended"


class GameMode(StrEnum):
    """How the secret word is built."""

    NORMAL = "normal"
    COMBINATION = "combination"  # each choice joins several words


class Visibility(StrEnum):
    """Whether a room shows up in the public listing."""

    PUBLIC = "public"
    PRIVATE = "private"


class DrawingTool(StrEnum):
    """Tool names used by drawing actions on the wire."""

    PENCIL = "pencil"
    ERASER = "eraser"
    FILL = "fill"
    CLEAR = "clear"
    UNDO = "undo"


class RoundEndReason(StrEnum):
    """Why a round finished."""

    TIME_UP = "time_up"
    ALL_GUESSED = "all_guessed"
    DRAWER_LEFT = "drawer_left"
