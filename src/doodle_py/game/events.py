"""Outbound notifications produced by the room engine.

Each event is a frozen dataclass with a wire ``type`` and a ``to_dict``
serializer. The engine wraps events in an :class:`Envelope` that scopes
them to a whole room, a room minus one session, or a single session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, ClassVar, Protocol


@dataclass(frozen=True, kw_only=True)
class Event:
    """Base class for outbound events."""

    type: ClassVar[str] = "event"
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def payload(self) -> dict[str, Any]:
        """Event specific fields."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for JSON serialization."""
        return {"type": self.type, "timestamp": self.timestamp.isoformat(), **self.payload()}


@dataclass(frozen=True)
class RoomCreated(Event):
    """Sent to the creator once their room exists."""

    type: ClassVar[str] = "room_created"
    room_code: str

    def payload(self) -> dict[str, Any]:
        return {"room_code": self.room_code}


@dataclass(frozen=True)
class JoinedRoom(Event):
    """Sent to a player that joined or reconnected."""

    type: ClassVar[str] = "joined_room"
    room_code: str
    player_id: str

    def payload(self) -> dict[str, Any]:
        return {"room_code": self.room_code, "player_id": self.player_id}


@dataclass(frozen=True)
class RoomState(Event):
    """Full room and roster snapshot."""

    type: ClassVar[str] = "room_state"
    room: dict[str, Any]

    def payload(self) -> dict[str, Any]:
        return {"room": self.room}


@dataclass(frozen=True)
class TimerUpdate(Event):
    """Countdown tick."""

    type: ClassVar[str] = "timer_update"
    timer: int

    def payload(self) -> dict[str, Any]:
        return {"timer": self.timer}


@dataclass(frozen=True)
class WordChoices(Event):
    """Word choice prompt, delivered to the drawer only."""

    type: ClassVar[str] = "choose_word"
    choices: tuple[str, ...]
    timeout: float

    def payload(self) -> dict[str, Any]:
        return {"choices": list(self.choices), "timeout": self.timeout}


@dataclass(frozen=True)
class WordHint(Event):
    """Masked word as guessers see it."""

    type: ClassVar[str] = "word_hint"
    hint: str

    def payload(self) -> dict[str, Any]:
        return {"hint": self.hint}


@dataclass(frozen=True)
class SecretWord(Event):
    """Literal word, delivered to the drawer only."""

    type: ClassVar[str] = "secret_word"
    word: str

    def payload(self) -> dict[str, Any]:
        return {"word": self.word}


@dataclass(frozen=True)
class ChatMessage(Event):
    """A chat line or guess attempt."""

    type: ClassVar[str] = "chat_message"
    player_id: str
    nickname: str
    text: str

    def payload(self) -> dict[str, Any]:
        return {"player_id": self.player_id, "nickname": self.nickname, "text": self.text}


@dataclass(frozen=True)
class SystemMessage(Event):
    """Server generated notice."""

    type: ClassVar[str] = "system_message"
    content: str
    correct_guess: bool = False

    def payload(self) -> dict[str, Any]:
        return {"content": self.content, "correct_guess": self.correct_guess}


@dataclass(frozen=True)
class DrawingUpdate(Event):
    """A stroke segment or fill appended to the drawing log."""

    type: ClassVar[str] = "drawing_action"
    action: dict[str, Any]

    def payload(self) -> dict[str, Any]:
        return {"action": self.action}


@dataclass(frozen=True)
class CanvasCleared(Event):
    """Instruction to wipe the canvas."""

    type: ClassVar[str] = "canvas_cleared"


@dataclass(frozen=True)
class DrawingHistory(Event):
    """The whole drawing log, for late joiners and after an undo."""

    type: ClassVar[str] = "drawing_history"
    entries: tuple[dict[str, Any], ...]

    def payload(self) -> dict[str, Any]:
        return {"entries": list(self.entries)}


@dataclass(frozen=True)
class RoundEnded(Event):
    """Round summary with the revealed word."""

    type: ClassVar[str] = "round_ended"
    word: str
    reason: str
    scores: tuple[dict[str, Any], ...]

    def payload(self) -> dict[str, Any]:
        return {"word": self.word, "reason": self.reason, "scores": list(self.scores)}


@dataclass(frozen=True)
class FinalScores(Event):
    """Final standings of a finished game."""

    type: ClassVar[str] = "final_scores"
    standings: tuple[dict[str, Any], ...]

    def payload(self) -> dict[str, Any]:
        return {"standings": list(self.standings)}


@dataclass(frozen=True)
class ErrorNotice(Event):
    """Rejection reason, delivered to the requesting session only."""

    type: ClassVar[str] = "error"
    code: str
    message: str

    def payload(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


OutboundEvent = (
    RoomCreated
    | JoinedRoom
    | RoomState
    | TimerUpdate
    | WordChoices
    | WordHint
    | SecretWord
    | ChatMessage
    | SystemMessage
    | DrawingUpdate
    | CanvasCleared
    | DrawingHistory
    | RoundEnded
    | FinalScores
    | ErrorNotice
)


@dataclass(frozen=True)
class Envelope:
    """An event and its audience.

    Attributes:
        room_code: Room the event belongs to.
        event: The event itself.
        recipient: Single session to deliver to; None means the whole room.
        exclude: Session left out of a room-wide delivery.
    """

    room_code: str
    event: OutboundEvent
    recipient: str | None = None
    exclude: str | None = None


class Notifier(Protocol):
    """Receives every envelope the engine produces.

    ``publish`` must not block; delivery is fire-and-forget.
    """

    def publish(self, envelope: Envelope) -> None: ...
