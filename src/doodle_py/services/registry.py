"""Registry of live rooms.

The registry is the only way to reach a room: rooms are inserted on
creation and removed when their last seat is gone. It owns the round
engine and presence supervisor shared by all rooms and forwards their
outbound envelopes to the bound notifier.
"""

from __future__ import annotations

import asyncio
import random
import string
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog

from doodle_py.exceptions import RoomNotFoundError
from doodle_py.game.events import RoomCreated
from doodle_py.game.models import Player, Room, RoomSettings, validate_nickname, validate_room_name
from doodle_py.game.types import Visibility
from doodle_py.game.wordbank import WordBank
from doodle_py.services.engine import RoundEngine
from doodle_py.services.presence import PresenceSupervisor

if TYPE_CHECKING:
    from doodle_py.core.config import EngineTimings
    from doodle_py.game.events import Envelope, Notifier

logger = structlog.get_logger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
ROOM_CODE_LENGTH = 6


@dataclass(frozen=True)
class RoomListing:
    """Entry of the public room listing."""

    code: str
    name: str
    player_count: int
    max_players: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "code": self.code,
            "name": self.name,
            "player_count": self.player_count,
            "max_players": self.max_players,
        }


class RoomRegistry:
    """Maps room codes to live rooms.

    Attributes:
        engine: Round state machine shared by all rooms.
        presence: Presence supervisor shared by all rooms.
    """

    def __init__(
        self,
        *,
        word_bank: WordBank | None = None,
        timings: EngineTimings | None = None,
        notifier: Notifier | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            word_bank: Word source. If None, uses the built-in word list.
            timings: Timer delays for every room.
            notifier: Receiver of outbound envelopes. Can be bound later.
            rng: Random source for room codes, word picks and hints.
        """
        self._rooms: dict[str, Room] = {}
        self._notifier = notifier
        self._rng = rng or random.Random()
        self.word_bank = word_bank or WordBank()
        self.engine = RoundEngine(self, self.word_bank, timings, rng=self._rng)
        self.presence = PresenceSupervisor(self.engine, on_room_empty=self.destroy_room)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.strip().upper() in self._rooms

    @property
    def rooms(self) -> list[Room]:
        """All live rooms."""
        return list(self._rooms.values())

    def bind_notifier(self, notifier: Notifier) -> None:
        """Route outbound envelopes to ``notifier``."""
        self._notifier = notifier

    def publish(self, envelope: Envelope) -> None:
        """Forward an envelope to the bound notifier."""
        if self._notifier is None:
            logger.debug("No notifier bound, dropping event", event=envelope.event.type)
            return
        self._notifier.publish(envelope)

    def _generate_room_code(self) -> str:
        while True:
            code = "".join(self._rng.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))
            if code not in self._rooms:
                return code

    def create_room(
        self,
        *,
        name: str,
        player_key: str,
        session_id: str,
        nickname: str,
        visibility: Visibility = Visibility.PUBLIC,
        settings: RoomSettings | None = None,
    ) -> Room:
        """Create a room with the requesting player as host.

        Args:
            name: Display name, 3-30 characters.
            player_key: Durable identity of the creator.
            session_id: Transport session of the creator.
            nickname: Creator's display name.
            visibility: Whether the room is listed publicly.
            settings: Room settings. Defaults apply when None.

        Returns:
            The new room.

        Raises:
            InvalidSettingsError: If the name or nickname is invalid.
        """
        name = validate_room_name(name)
        nickname = validate_nickname(nickname)
        room = Room(
            code=self._generate_room_code(),
            name=name,
            settings=settings or RoomSettings(),
            visibility=visibility,
        )
        room.roster.add(Player(key=player_key, session_id=session_id, nickname=nickname, is_host=True))
        self._rooms[room.code] = room

        logger.info(
            "Room created",
            room_code=room.code,
            name=name,
            host=nickname,
            visibility=visibility.value,
            rooms=len(self._rooms),
        )
        self.engine.send(room, session_id, RoomCreated(room_code=room.code))
        self.engine.broadcast_state(room)
        return room

    def find_room(self, code: str) -> Room | None:
        """Look up a room by code (case-insensitive)."""
        return self._rooms.get(code.strip().upper())

    def get_room(self, code: str) -> Room:
        """Look up a room by code.

        Raises:
            RoomNotFoundError: If no live room has that code.
        """
        room = self.find_room(code)
        if room is None:
            raise RoomNotFoundError(code)
        return room

    def list_public_joinable(self) -> list[RoomListing]:
        """Public rooms that still have a free seat, oldest first."""
        return [
            RoomListing(
                code=room.code,
                name=room.name,
                player_count=len(room.roster),
                max_players=room.settings.max_players,
            )
            for room in self._rooms.values()
            if room.is_joinable
        ]

    def destroy_room(self, room: Room) -> None:
        """Cancel the room's timers and remove it from the registry."""
        room.close()
        if self._rooms.get(room.code) is room:
            del self._rooms[room.code]
        logger.info("Room destroyed", room_code=room.code, rooms=len(self._rooms))

    async def shutdown(self) -> None:
        """Close every room and wait for their timers to finish."""
        tasks: list[asyncio.Task] = []
        for room in list(self._rooms.values()):
            tasks.extend(room.close())
        self._rooms.clear()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Room registry shut down", cancelled_timers=len(tasks))
