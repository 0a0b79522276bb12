"""Litestar controllers for the game room API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

import structlog
from litestar import Controller, get

from doodle_py.game.models import Room  # noqa: TC001
from doodle_py.services.registry import RoomListing, RoomRegistry  # noqa: TC001

logger = structlog.get_logger(__name__)


@dataclass
class RoomResponseDTO:
    """Entry of the public room listing."""

    code: str
    name: str
    player_count: int
    max_players: int


@dataclass
class PlayerResponseDTO:
    """Response data for a player."""

    id: str
    nickname: str
    score: int
    is_host: bool
    connected: bool


@dataclass
class RoomDetailDTO:
    """Summary of a single room."""

    code: str
    name: str
    visibility: str
    status: str
    players: list[PlayerResponseDTO]
    settings: dict[str, Any]
    current_round: int
    total_rounds: int


def listing_to_response(listing: RoomListing) -> RoomResponseDTO:
    """Convert a registry listing to a response DTO."""
    return RoomResponseDTO(
        code=listing.code,
        name=listing.name,
        player_count=listing.player_count,
        max_players=listing.max_players,
    )


def room_to_detail(room: Room) -> RoomDetailDTO:
    """Convert a Room to a detail DTO."""
    return RoomDetailDTO(
        code=room.code,
        name=room.name,
        visibility=room.visibility.value,
        status=room.state.status.value,
        players=[
            PlayerResponseDTO(
                id=p.session_id,
                nickname=p.nickname,
                score=p.score,
                is_host=p.is_host,
                connected=p.connected,
            )
            for p in room.roster
        ],
        settings=room.settings.to_dict(),
        current_round=room.state.current_round,
        total_rounds=room.settings.rounds,
    )


class RoomController(Controller):
    """Read-only access to live rooms.

    Rooms are created and played over the WebSocket; these endpoints serve
    the lobby browser.
    """

    path = "/rooms"
    tags: ClassVar[list[str]] = ["Rooms"]

    @get("/")
    async def list_rooms(self, room_registry: RoomRegistry) -> list[RoomResponseDTO]:
        """List public rooms that still have a free seat.

        Args:
            room_registry: Room registry (injected).

        Returns:
            Joinable public rooms.
        """
        return [listing_to_response(listing) for listing in room_registry.list_public_joinable()]

    @get("/{code:str}")
    async def get_room(self, code: str, room_registry: RoomRegistry) -> RoomDetailDTO:
        """Get a room by code.

        Args:
            code: The room code (case-insensitive).
            room_registry: Room registry (injected).

        Returns:
            The room summary.

        Raises:
            RoomNotFoundError: If no live room has that code.
        """
        room = room_registry.get_room(code)
        logger.debug("Room looked up", room_code=room.code)
        return room_to_detail(room)
