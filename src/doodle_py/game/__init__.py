"""Game domain for doodle-py.

Rooms, rosters, round state, scoring, hints, the drawing log, the word bank
and per-room timers. Nothing in this package performs I/O.
"""

from __future__ import annotations

__all__ = [
    "DrawingLog",
    "GameMode",
    "Player",
    "PlayerRoster",
    "Room",
    "RoomSettings",
    "RoomTimers",
    "RoundEndReason",
    "RoundState",
    "RoundStatus",
    "Visibility",
    "WordBank",
]

from doodle_py.game.drawing import DrawingLog
from doodle_py.game.models import Player, Room, RoomSettings, RoundState
from doodle_py.game.roster import PlayerRoster
from doodle_py.game.timers import RoomTimers
from doodle_py.game.types import GameMode, RoundEndReason, RoundStatus, Visibility
from doodle_py.game.wordbank import WordBank
