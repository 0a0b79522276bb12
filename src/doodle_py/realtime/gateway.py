"""Session gateway between transport connections and rooms.

The gateway resolves each inbound verb to its room, runs the matching
engine or presence operation under the room lock and fans the resulting
envelopes out to the connection sinks of the room's players. Errors are
contained per request: domain errors come back to the requester as an
error notice and never reach other sessions or rooms.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Protocol, assert_never

import structlog

from doodle_py.exceptions import DoodleError, RoomNotFoundError
from doodle_py.game.events import ErrorNotice
from doodle_py.realtime.messages import (
    ChooseWord,
    CreateRoom,
    Disconnect,
    JoinRoom,
    ResetGame,
    StartGame,
    SubmitDrawing,
    SubmitGuess,
    parse_inbound,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from doodle_py.game.events import Envelope
    from doodle_py.game.models import Room
    from doodle_py.realtime.messages import InboundMessage
    from doodle_py.services.registry import RoomRegistry

logger = structlog.get_logger(__name__)


class ConnectionSink(Protocol):
    """Outbound side of a single connection. ``send`` must not block."""

    def send(self, payload: dict[str, Any]) -> None: ...


class SessionGateway:
    """Dispatches inbound verbs and delivers outbound events.

    A session is one transport connection. Each session belongs to at most
    one room at a time.
    """

    def __init__(self, registry: RoomRegistry) -> None:
        """Initialize the gateway and bind it as the registry's notifier.

        Args:
            registry: The room registry.
        """
        self._registry = registry
        self._sinks: dict[str, ConnectionSink] = {}
        self._session_rooms: dict[str, str] = {}
        registry.bind_notifier(self)

    @property
    def connection_count(self) -> int:
        """Number of open connections."""
        return len(self._sinks)

    def connect(self, session_id: str, sink: ConnectionSink) -> None:
        """Register a new connection."""
        self._sinks[session_id] = sink
        logger.debug("Session connected", session_id=session_id, connections=len(self._sinks))

    def room_of(self, session_id: str) -> str | None:
        """Code of the room a session is in."""
        return self._session_rooms.get(session_id)

    async def handle_raw(self, session_id: str, data: Any) -> None:
        """Parse a decoded frame and handle it."""
        try:
            message = parse_inbound(data)
        except DoodleError as exc:
            logger.info("Rejected malformed message", session_id=session_id, error=str(exc))
            self._reject(session_id, exc)
            return
        await self.handle(session_id, message)

    async def handle(self, session_id: str, message: InboundMessage) -> None:
        """Handle one inbound verb.

        Never raises: domain errors become an error notice for the
        requester, anything else is logged and reported as an internal error.
        """
        try:
            await self._dispatch(session_id, message)
        except DoodleError as exc:
            logger.info(
                "Rejected message",
                session_id=session_id,
                message_type=type(message).__name__,
                code=exc.code,
                error=str(exc),
            )
            self._reject(session_id, exc)
        except Exception:
            logger.exception("Error handling message", session_id=session_id, message_type=type(message).__name__)
            self._deliver(session_id, ErrorNotice(code="internal_error", message="Internal server error").to_dict())

    async def disconnect(self, session_id: str) -> None:
        """Handle the end of a connection and forget its sink."""
        await self.handle(session_id, Disconnect())
        self._sinks.pop(session_id, None)
        logger.debug("Session closed", session_id=session_id, connections=len(self._sinks))

    async def _dispatch(self, session_id: str, message: InboundMessage) -> None:
        engine = self._registry.engine
        match message:
            case CreateRoom():
                await self._leave_current_room(session_id)
                room = self._registry.create_room(
                    name=message.room_name,
                    player_key=message.player_key,
                    session_id=session_id,
                    nickname=message.nickname,
                    visibility=message.visibility,
                    settings=message.settings,
                )
                self._session_rooms[session_id] = room.code
            case JoinRoom():
                room = self._registry.get_room(message.room_code)
                if self._session_rooms.get(session_id) != room.code:
                    # Room locks are never nested; check the target, release it, then leave.
                    async with self._locked(room.code) as room:
                        self._registry.presence.validate_join(
                            room,
                            player_key=message.player_key,
                            session_id=session_id,
                            nickname=message.nickname,
                        )
                    await self._leave_current_room(session_id)
                async with self._locked(room.code) as room:
                    self._registry.presence.join(
                        room,
                        player_key=message.player_key,
                        session_id=session_id,
                        nickname=message.nickname,
                    )
                self._session_rooms[session_id] = room.code
            case StartGame():
                async with self._locked(message.room_code) as room:
                    engine.start_game(room, session_id)
            case ChooseWord():
                async with self._locked(message.room_code) as room:
                    engine.choose_word(room, session_id, message.word)
            case SubmitGuess():
                async with self._locked(message.room_code) as room:
                    engine.submit_guess(room, session_id, message.text)
            case SubmitDrawing():
                async with self._locked(message.room_code) as room:
                    engine.apply_drawing(room, session_id, message.action)
            case ResetGame():
                async with self._locked(message.room_code) as room:
                    engine.reset_game(room, session_id)
            case Disconnect():
                await self._leave_current_room(session_id)
            case _:
                assert_never(message)

    @asynccontextmanager
    async def _locked(self, room_code: str) -> AsyncIterator[Room]:
        room = self._registry.get_room(room_code)
        async with room.lock:
            if room.closed:
                raise RoomNotFoundError(room_code)
            yield room

    async def _leave_current_room(self, session_id: str) -> None:
        code = self._session_rooms.pop(session_id, None)
        if code is None:
            return
        room = self._registry.find_room(code)
        if room is None:
            return
        async with room.lock:
            if not room.closed:
                self._registry.presence.disconnect(room, session_id)

    def _reject(self, session_id: str, exc: DoodleError) -> None:
        self._deliver(session_id, ErrorNotice(code=exc.code, message=str(exc)).to_dict())

    def publish(self, envelope: Envelope) -> None:
        """Deliver an envelope to its recipient or to every connected player of its room."""
        payload = envelope.event.to_dict()
        if envelope.recipient is not None:
            self._deliver(envelope.recipient, payload)
            return
        room = self._registry.find_room(envelope.room_code)
        if room is None:
            return
        for player in room.roster.connected:
            if player.session_id != envelope.exclude:
                self._deliver(player.session_id, payload)

    def _deliver(self, session_id: str, payload: dict[str, Any]) -> None:
        sink = self._sinks.get(session_id)
        if sink is None:
            logger.debug("No connection for session", session_id=session_id, event=payload.get("type"))
            return
        try:
            sink.send(payload)
        except Exception:
            logger.warning("Failed to queue message", session_id=session_id, event=payload.get("type"), exc_info=True)
