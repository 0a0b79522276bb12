"""Doodle-py: a Litestar server for a multiplayer draw-and-guess game.

Players join rooms, take turns drawing a secret word while the others race
to guess it, and score by speed. The package contains the game domain
(rooms, rounds, scoring, hints, the drawing log and per-room timers), the
services that drive it, a WebSocket gateway and a Litestar plugin that
wires everything into an application.

Key Components:
    - Game: Room, RoomSettings, Player, WordBank, DrawingLog
    - Services: RoomRegistry, RoundEngine, PresenceSupervisor
    - Realtime: SessionGateway and the game WebSocket handler
    - Plugin: DoodlePlugin for Litestar integration

Quick Start:
    >>> from litestar import Litestar
    >>> from doodle_py import DoodlePlugin, DoodleConfig
    >>>
    >>> app = Litestar(
    ...     plugins=[DoodlePlugin(DoodleConfig())],
    ... )
"""

from __future__ import annotations

from doodle_py.core.config import AppSettings, EngineTimings
from doodle_py.exceptions import (
    DoodleError,
    GameStateError,
    InvalidMessageError,
    InvalidSettingsError,
    NotAuthorizedError,
    PlayerNotFoundError,
    RoomFullError,
    RoomNotFoundError,
)
from doodle_py.game import Player, Room, RoomSettings, WordBank
from doodle_py.plugin import DoodleConfig, DoodlePlugin
from doodle_py.realtime import SessionGateway
from doodle_py.services import PresenceSupervisor, RoomRegistry, RoundEngine

__all__ = [
    "AppSettings",
    "DoodleConfig",
    "DoodleError",
    "DoodlePlugin",
    "EngineTimings",
    "GameStateError",
    "InvalidMessageError",
    "InvalidSettingsError",
    "NotAuthorizedError",
    "Player",
    "PlayerNotFoundError",
    "PresenceSupervisor",
    "Room",
    "RoomFullError",
    "RoomNotFoundError",
    "RoomRegistry",
    "RoomSettings",
    "RoundEngine",
    "SessionGateway",
    "WordBank",
]

__version__ = "0.1.0"
