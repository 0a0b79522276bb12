"""Custom exceptions for doodle-py.

Every error carries a stable ``code`` that is sent to clients in error
notices and REST error bodies.
"""

from __future__ import annotations

from typing import Any, ClassVar


class DoodleError(Exception):
    """Base exception class for all doodle-py errors."""

    code: ClassVar[str] = "doodle_error"


class RoomNotFoundError(DoodleError):
    """Raised when no live room matches the requested code.

    Attributes:
        room_code: The code that was looked up.
    """

    code: ClassVar[str] = "room_not_found"

    def __init__(self, room_code: str) -> None:
        """Initialize the exception with the room code.

        Args:
            room_code: The code that was looked up.
        """
        self.room_code = room_code
        super().__init__(f"Room {room_code} not found")


class RoomFullError(DoodleError):
    """Raised when joining a room whose roster is at capacity."""

    code: ClassVar[str] = "room_full"

    def __init__(self, room_code: str, max_players: int) -> None:
        """Initialize the exception.

        Args:
            room_code: The room that is full.
            max_players: The configured capacity.
        """
        self.room_code = room_code
        self.max_players = max_players
        super().__init__(f"Room {room_code} is full ({max_players} players)")


class PlayerNotFoundError(DoodleError):
    """Raised when a session is not part of the room it addresses."""

    code: ClassVar[str] = "player_not_found"

    def __init__(self, room_code: str, session_id: str) -> None:
        """Initialize the exception.

        Args:
            room_code: The room that was addressed.
            session_id: The session that is not in the roster.
        """
        self.room_code = room_code
        self.session_id = session_id
        super().__init__(f"You are not a player in room {room_code}")


class NotAuthorizedError(DoodleError):
    """Raised when a non-host or non-drawer attempts a privileged action."""

    code: ClassVar[str] = "not_authorized"

    def __init__(self, action: str, message: str) -> None:
        """Initialize the exception.

        Args:
            action: Name of the rejected action.
            message: Human readable reason.
        """
        self.action = action
        super().__init__(message)


class GameStateError(DoodleError):
    """Raised when an action is not valid in the current round phase."""

    code: ClassVar[str] = "invalid_state"


class InvalidSettingsError(DoodleError):
    """Raised when room settings fall outside their allowed bounds.

    Attributes:
        field: Name of the offending setting.
        value: The rejected value.
    """

    code: ClassVar[str] = "invalid_settings"

    def __init__(self, field: str, value: Any, reason: str) -> None:
        """Initialize the exception.

        Args:
            field: Name of the offending setting.
            value: The rejected value.
            reason: Why the value was rejected.
        """
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {reason}")


class InvalidMessageError(DoodleError):
    """Raised when an inbound message is malformed or of an unknown type."""

    code: ClassVar[str] = "invalid_message"
