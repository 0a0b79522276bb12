"""Joins, disconnects, reconnection grace periods and host failover."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING

import structlog

from doodle_py.exceptions import GameStateError, RoomFullError
from doodle_py.game.events import JoinedRoom
from doodle_py.game.models import Player, validate_nickname
from doodle_py.game.timers import removal_slot
from doodle_py.game.types import RoundEndReason, RoundStatus
from doodle_py.services.engine import MIN_PLAYERS

if TYPE_CHECKING:
    from collections.abc import Callable

    from doodle_py.game.models import Room
    from doodle_py.services.engine import RoundEngine

logger = structlog.get_logger(__name__)

DRAWER_LEFT_NOTICE = "The drawer has left. The round will end shortly."


class PresenceSupervisor:
    """Tracks connection state of room players.

    A disconnected player keeps their seat for the grace period. Rejoining
    with the same durable key inside that window restores the seat with its
    score; otherwise the seat is removed and an empty room is destroyed.
    """

    def __init__(self, engine: RoundEngine, *, on_room_empty: Callable[[Room], None]) -> None:
        """Initialize the supervisor.

        Args:
            engine: Round engine used for notices and forced round/game ends.
            on_room_empty: Called once the last seat of a room is removed.
        """
        self._engine = engine
        self._on_room_empty = on_room_empty

    def join(self, room: Room, *, player_key: str, session_id: str, nickname: str) -> Player:
        """Add a player to the room, or reconnect them if the key is known.

        Args:
            room: Target room.
            player_key: Durable client identity.
            session_id: Transport session of the connection.
            nickname: Display name for a new seat.

        Returns:
            The joined or reconnected player.

        Raises:
            RoomFullError: If a new seat is needed and the roster is full.
            InvalidSettingsError: If the nickname is empty or too long.
            GameStateError: If the session already holds a seat under another key.
        """
        self.validate_join(room, player_key=player_key, session_id=session_id, nickname=nickname)
        player = room.roster.by_key(player_key)
        if player is not None:
            self._reconnect(room, player, session_id)
        else:
            player = Player(key=player_key, session_id=session_id, nickname=validate_nickname(nickname))
            room.roster.add(player)
            self._engine.notice(room, f"{player.nickname} has joined the game.")
            logger.info("Player joined", room_code=room.code, player=player.nickname, players=len(room.roster))

        self._ensure_host(room)
        self._engine.send(room, session_id, JoinedRoom(room_code=room.code, player_id=session_id))
        self._engine.broadcast_state(room)
        self._engine.catch_up(room, player)
        return player

    def validate_join(self, room: Room, *, player_key: str, session_id: str, nickname: str) -> None:
        """Check that ``join`` would succeed without changing anything.

        Raises:
            GameStateError: If the session already holds a seat under another key.
            RoomFullError: If a new seat is needed and the roster is full.
            InvalidSettingsError: If the nickname is empty or too long.
        """
        seated = room.roster.by_session(session_id)
        if seated is not None and seated.key != player_key:
            raise GameStateError("This connection already holds a seat in the room.")
        if room.roster.by_key(player_key) is not None:
            return
        validate_nickname(nickname)
        if room.is_full:
            raise RoomFullError(room.code, room.settings.max_players)

    def _reconnect(self, room: Room, player: Player, session_id: str) -> None:
        state = room.state
        room.timers.cancel(removal_slot(player.key))
        player.removal_timer = None

        previous = player.session_id
        player.session_id = session_id
        player.connected = True
        if state.drawer_id is not None and state.drawer_id == previous:
            state.drawer_id = session_id
        if player.key in state.solved_keys:
            if previous in state.guessed_ids:
                state.guessed_ids[state.guessed_ids.index(previous)] = session_id
            elif session_id not in state.guessed_ids:
                state.guessed_ids.append(session_id)

        self._engine.notice(room, f"{player.nickname} has reconnected.")
        logger.info("Player reconnected", room_code=room.code, player=player.nickname)

    def disconnect(self, room: Room, session_id: str) -> Player | None:
        """Mark the player bound to ``session_id`` as disconnected.

        Ends the turn if they were drawing, hands the host flag over, ends
        the game when too few players remain, and arms the removal timer.

        Returns:
            The disconnected player, or None if the session had no live seat.
        """
        player = room.roster.by_session(session_id)
        if player is None or not player.connected:
            return None
        state = room.state
        was_active = state.is_active

        player.connected = False
        if session_id in state.guessed_ids:
            state.guessed_ids.remove(session_id)
        self._engine.notice(room, f"{player.nickname} has disconnected.")
        logger.info("Player disconnected", room_code=room.code, player=player.nickname)

        if session_id == state.drawer_id:
            if state.status == RoundStatus.PLAYING:
                self._engine.notice(room, DRAWER_LEFT_NOTICE)
                self._engine.end_round(room, RoundEndReason.DRAWER_LEFT)
            elif state.status == RoundStatus.CHOOSING_WORD:
                self._engine.notice(room, DRAWER_LEFT_NOTICE)
                self._engine.abort_word_choice(room)
            state.drawer_id = None

        player.removal_timer = room.timers.arm(
            removal_slot(player.key),
            self._engine.timings.disconnect_grace,
            partial(self._expire, room, player.key),
        )

        self._ensure_host(room)

        if was_active and room.roster.connected_count() < MIN_PLAYERS:
            self._engine.end_game(room, "Not enough players to continue.")

        self._engine.broadcast_state(room)
        return player

    def _expire(self, room: Room, player_key: str) -> None:
        player = room.roster.by_key(player_key)
        if room.closed or player is None or player.connected:
            logger.debug("Ignoring stale removal timer", room_code=room.code)
            return

        index = room.roster.remove(player_key)
        player.removal_timer = None
        state = room.state
        if index is not None and index <= state.turn:
            state.turn -= 1
        logger.info("Player removed after grace period", room_code=room.code, player=player.nickname)

        if len(room.roster) == 0:
            self._on_room_empty(room)
            return
        self._ensure_host(room)
        self._engine.broadcast_state(room)

    def _ensure_host(self, room: Room) -> None:
        promoted = room.roster.ensure_host()
        if promoted is not None:
            self._engine.notice(room, f"{promoted.nickname} is now the host.")
            logger.info("Host promoted", room_code=room.code, host=promoted.nickname)
