"""Room engine data models.

This module defines the state held for every live room: its immutable
settings, the players, the round state machine data, and the room itself
which ties them together with the drawing log, timers and the room lock.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, ClassVar

from doodle_py.exceptions import InvalidSettingsError
from doodle_py.game.drawing import DrawingLog
from doodle_py.game.hints import mask_word
from doodle_py.game.roster import PlayerRoster
from doodle_py.game.timers import RoomTimers
from doodle_py.game.types import GameMode, RoundStatus, Visibility

if TYPE_CHECKING:
    from doodle_py.game.timers import TimerHandle

ROOM_NAME_LENGTH = (3, 30)
NICKNAME_LENGTH = (1, 24)

# Client side names accepted by RoomSettings.from_dict
_SETTING_ALIASES = {
    "drawTime": "draw_time",
    "maxPlayers": "max_players",
    "wordCount": "word_count",
    "wordLength": "word_length",
    "gameMode": "mode",
    "game_mode": "mode",
}


def _validate_text(field_name: str, value: Any, bounds: tuple[int, int]) -> str:
    if not isinstance(value, str):
        raise InvalidSettingsError(field_name, value, "must be a string")
    text = " ".join(value.split())
    low, high = bounds
    if not low <= len(text) <= high:
        raise InvalidSettingsError(field_name, value, f"must be {low}-{high} characters")
    return text


def validate_room_name(name: Any) -> str:
    """Normalize whitespace in a room name and check its length."""
    return _validate_text("room_name", name, ROOM_NAME_LENGTH)


def validate_nickname(nickname: Any) -> str:
    """Normalize whitespace in a nickname and check its length."""
    return _validate_text("nickname", nickname, NICKNAME_LENGTH)


@dataclass(frozen=True)
class RoomSettings:
    """Settings captured when a room is created.

    Instances are immutable; out-of-range values are rejected on construction.

    Attributes:
        rounds: Number of full rotations through the roster (1-10).
        draw_time: Seconds per drawing phase (30-120).
        max_players: Roster capacity, counting disconnected seats (2-12).
        hints: Number of letter-reveal steps during a round (0-5).
        word_count: Words joined per choice in combination mode (1-5).
        word_length: Letter count filter for words, 0 for any (0-20).
        mode: Normal or combination mode.
    """

    BOUNDS: ClassVar[dict[str, tuple[int, int]]] = {
        "rounds": (1, 10),
        "draw_time": (30, 120),
        "max_players": (2, 12),
        "hints": (0, 5),
        "word_count": (1, 5),
        "word_length": (0, 20),
    }

    rounds: int = 3
    draw_time: int = 80
    max_players: int = 8
    hints: int = 2
    word_count: int = 1
    word_length: int = 0
    mode: GameMode = GameMode.NORMAL

    def __post_init__(self) -> None:
        for name, (low, high) in self.BOUNDS.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidSettingsError(name, value, "must be an integer")
            if not low <= value <= high:
                raise InvalidSettingsError(name, value, f"must be between {low} and {high}")
        try:
            object.__setattr__(self, "mode", GameMode(self.mode))
        except ValueError as exc:
            raise InvalidSettingsError("mode", self.mode, "must be 'normal' or 'combination'") from exc

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> RoomSettings:
        """Build settings from a client payload.

        Accepts snake_case and camelCase keys; unknown keys are ignored and
        missing keys take their defaults.

        Raises:
            InvalidSettingsError: If a value is missing its type or out of range.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidSettingsError("settings", data, "must be an object")
        known = {"rounds", "draw_time", "max_players", "hints", "word_count", "word_length", "mode"}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _SETTING_ALIASES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "rounds": self.rounds,
            "draw_time": self.draw_time,
            "max_players": self.max_players,
            "hints": self.hints,
            "word_count": self.word_count,
            "word_length": self.word_length,
            "mode": self.mode.value,
        }


@dataclass(eq=False)
class Player:
    """A seat in a room.

    Attributes:
        key: Durable identity supplied by the client; survives reconnection.
        session_id: Transport session of the current connection.
        nickname: Display name.
        score: Points accumulated in the current game.
        is_host: Whether this player may start and reset games.
        connected: Whether a live connection is bound to the seat.
        removal_timer: Grace period timer, only set while disconnected.
        joined_at: When the seat was created.
    """

    key: str
    session_id: str
    nickname: str
    score: int = 0
    is_host: bool = False
    connected: bool = True
    removal_timer: TimerHandle | None = field(default=None, repr=False)
    joined_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def award_points(self, points: int) -> None:
        """Add points to the player's score."""
        self.score += points

    def to_dict(self, *, guessed: bool = False) -> dict[str, Any]:
        """Public view of the player. The durable key is never exposed."""
        return {
            "id": self.session_id,
            "nickname": self.nickname,
            "score": self.score,
            "is_host": self.is_host,
            "connected": self.connected,
            "guessed": guessed,
        }


@dataclass
class RoundState:
    """Data of the round state machine.

    Attributes:
        status: Current phase.
        current_round: 1-based round number; a round is one rotation through the roster.
        turn: Roster position of the current drawer, -1 before the first turn.
        drawer_id: Session of the current drawer, always a connected player when set.
        word: The secret word or phrase.
        choices: Words offered to the drawer this turn.
        timer: Seconds left in the drawing phase.
        guessed_ids: Sessions that guessed correctly this turn, in guess order.
        solved_keys: Durable keys that guessed correctly this turn.
        revealed: Letter positions of ``word`` shown to guessers.
        hints_elapsed: Hint steps reached so far.
        phase: Incremented on every phase transition; timers remember it to detect staleness.
    """

    status: RoundStatus = RoundStatus.WAITING
    current_round: int = 1
    turn: int = -1
    drawer_id: str | None = None
    word: str = ""
    choices: list[str] = field(default_factory=list)
    timer: int = 0
    guessed_ids: list[str] = field(default_factory=list)
    solved_keys: set[str] = field(default_factory=set)
    revealed: set[int] = field(default_factory=set)
    hints_elapsed: int = 0
    phase: int = 0

    @property
    def is_active(self) -> bool:
        """Whether a turn is in progress (choosing a word or drawing)."""
        return self.status in (RoundStatus.CHOOSING_WORD, RoundStatus.PLAYING)

    def reset(self) -> None:
        """Return to the defaults of a fresh game. The phase counter keeps counting."""
        self.status = RoundStatus.WAITING
        self.current_round = 1
        self.turn = -1
        self.drawer_id = None
        self.clear_turn()

    def clear_turn(self) -> None:
        """Forget the word, choices and guesses of the previous turn."""
        self.word = ""
        self.choices = []
        self.timer = 0
        self.guessed_ids = []
        self.solved_keys = set()
        self.revealed = set()
        self.hints_elapsed = 0

    def masked_word(self) -> str:
        """The word as guessers currently see it."""
        return mask_word(self.word, self.revealed)

    def visible_word(self) -> str:
        """The word as shown in room snapshots for the current phase."""
        if self.status == RoundStatus.PLAYING:
            return self.masked_word()
        if self.status in (RoundStatus.ENDED_ROUND, RoundStatus.ENDED):
            return self.word
        return ""


@dataclass(eq=False)
class Room:
    """A live game session.

    All mutations of a room happen while holding :attr:`lock`, whether they
    come from an inbound message or one of the room's timers.

    Attributes:
        code: Short unique room code.
        name: Display name.
        settings: Settings fixed at creation.
        visibility: Public rooms appear in the room listing.
        roster: Players in join order.
        state: Round state machine data.
        drawing: Drawing log of the current turn.
        final_scores: Standings of the last finished game.
        lock: Serializes every mutation of this room.
        timers: Pending timers of this room.
        created_at: Creation time.
    """

    code: str
    name: str
    settings: RoomSettings
    visibility: Visibility = Visibility.PUBLIC
    roster: PlayerRoster = field(default_factory=PlayerRoster)
    state: RoundState = field(default_factory=RoundState)
    drawing: DrawingLog = field(default_factory=DrawingLog)
    final_scores: list[dict[str, Any]] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    timers: RoomTimers = field(init=False, repr=False)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        self.timers = RoomTimers(self.code, self.lock)

    @property
    def closed(self) -> bool:
        """Whether the room has been destroyed."""
        return self.timers.closed

    @property
    def is_full(self) -> bool:
        """Whether every seat is taken, counting disconnected seats."""
        return len(self.roster) >= self.settings.max_players

    @property
    def is_joinable(self) -> bool:
        """Whether the room belongs in the public listing."""
        return self.visibility == Visibility.PUBLIC and not self.is_full and not self.closed

    def close(self) -> list[asyncio.Task]:
        """Cancel all timers and mark the room as destroyed."""
        return self.timers.close()

    def snapshot(self) -> dict[str, Any]:
        """Room and roster state as broadcast to clients."""
        state = self.state
        guessed = set(state.guessed_ids)
        return {
            "code": self.code,
            "name": self.name,
            "visibility": self.visibility.value,
            "settings": self.settings.to_dict(),
            "players": [p.to_dict(guessed=p.session_id in guessed) for p in self.roster],
            "status": state.status.value,
            "current_round": state.current_round,
            "total_rounds": self.settings.rounds,
            "drawer_id": state.drawer_id,
            "timer": state.timer,
            "word": state.visible_word(),
            "final_scores": list(self.final_scores),
        }
