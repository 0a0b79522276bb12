"""Inbound message types for the game WebSocket.

Clients send JSON objects with a ``type`` field. :func:`parse_inbound`
turns them into one of the verb dataclasses below, which together form the
closed :data:`InboundMessage` union the gateway matches on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from doodle_py.exceptions import InvalidMessageError
from doodle_py.game.drawing import DrawingAction, parse_drawing_action
from doodle_py.game.models import RoomSettings
from doodle_py.game.types import Visibility

MAX_CHAT_LENGTH = 200
MAX_KEY_LENGTH = 64


class InboundType(StrEnum):
    """Wire names of client -> server messages."""

    CREATE_ROOM = "create_room"
    JOIN_ROOM = "join_room"
    START_GAME = "start_game"
    CHOOSE_WORD = "choose_word"
    SUBMIT_GUESS = "submit_guess"
    DRAWING_ACTION = "drawing_action"
    RESET_GAME = "reset_game"


@dataclass(frozen=True)
class CreateRoom:
    """Create a room and become its host."""

    room_name: str
    player_key: str
    nickname: str
    visibility: Visibility = Visibility.PUBLIC
    settings: RoomSettings = field(default_factory=RoomSettings)


@dataclass(frozen=True)
class JoinRoom:
    """Join a room, or reconnect to a seat held under the same key."""

    room_code: str
    player_key: str
    nickname: str


@dataclass(frozen=True)
class StartGame:
    """Host request to start the game."""

    room_code: str


@dataclass(frozen=True)
class ChooseWord:
    """Drawer's word choice."""

    room_code: str
    word: str


@dataclass(frozen=True)
class SubmitGuess:
    """Chat line or guess."""

    room_code: str
    text: str


@dataclass(frozen=True)
class SubmitDrawing:
    """Drawing action from the drawer."""

    room_code: str
    action: DrawingAction


@dataclass(frozen=True)
class ResetGame:
    """Host request to restart the game."""

    room_code: str


@dataclass(frozen=True)
class Disconnect:
    """The connection went away. Produced by the transport, never sent by clients."""


InboundMessage = CreateRoom | JoinRoom | StartGame | ChooseWord | SubmitGuess | SubmitDrawing | ResetGame | Disconnect


def _text(data: dict[str, Any], key: str, *, max_length: int | None = None) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise InvalidMessageError(f"'{key}' is required")
    if max_length is not None and len(value) > max_length:
        raise InvalidMessageError(f"'{key}' is too long (max {max_length} characters)")
    return value


def parse_inbound(data: Any) -> InboundMessage:
    """Parse a decoded JSON frame into an inbound verb.

    Args:
        data: The decoded frame.

    Returns:
        The matching verb.

    Raises:
        InvalidMessageError: If the frame is not an object, has an unknown
            type or misses required fields.
        InvalidSettingsError: If room settings are out of range.
        InvalidDrawingActionError: If a drawing action is malformed.
    """
    if not isinstance(data, dict):
        raise InvalidMessageError("Message must be a JSON object")
    raw_type = data.get("type")
    if not raw_type:
        raise InvalidMessageError("Message type required")
    try:
        msg_type = InboundType(raw_type)
    except ValueError as exc:
        raise InvalidMessageError(f"Unknown message type: {raw_type}") from exc

    match msg_type:
        case InboundType.CREATE_ROOM:
            return CreateRoom(
                room_name=_text(data, "room_name"),
                player_key=_text(data, "player_key", max_length=MAX_KEY_LENGTH),
                nickname=_text(data, "nickname"),
                visibility=Visibility.PRIVATE if data.get("is_private") else Visibility.PUBLIC,
                settings=RoomSettings.from_dict(data.get("settings")),
            )
        case InboundType.JOIN_ROOM:
            return JoinRoom(
                room_code=_text(data, "room_code"),
                player_key=_text(data, "player_key", max_length=MAX_KEY_LENGTH),
                nickname=_text(data, "nickname"),
            )
        case InboundType.START_GAME:
            return StartGame(room_code=_text(data, "room_code"))
        case InboundType.CHOOSE_WORD:
            return ChooseWord(room_code=_text(data, "room_code"), word=_text(data, "word"))
        case InboundType.SUBMIT_GUESS:
            return SubmitGuess(
                room_code=_text(data, "room_code"),
                text=_text(data, "text", max_length=MAX_CHAT_LENGTH),
            )
        case InboundType.DRAWING_ACTION:
            return SubmitDrawing(
                room_code=_text(data, "room_code"),
                action=parse_drawing_action(data.get("action")),
            )
        case InboundType.RESET_GAME:
            return ResetGame(room_code=_text(data, "room_code"))
    raise InvalidMessageError(f"Unhandled message type: {msg_type}")
