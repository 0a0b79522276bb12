"""Tests for joins, disconnects, reconnection and host failover."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from doodle_py.exceptions import GameStateError, InvalidSettingsError, RoomFullError
from doodle_py.game.drawing import Fill
from doodle_py.game.timers import removal_slot
from doodle_py.game.types import RoundStatus
from doodle_py.services.presence import DRAWER_LEFT_NOTICE

if TYPE_CHECKING:
    from collections.abc import Callable

    from conftest import RecordingNotifier

    from doodle_py.game.models import Room
    from doodle_py.services.registry import RoomRegistry


def start_playing(registry: RoomRegistry, room: Room, word: str = "apple") -> None:
    registry.engine.start_game(room, "s1")
    room.state.choices = [word]
    registry.engine.choose_word(room, "s1", word)


class TestJoin:
    """Test joining rooms."""

    async def test_join_adds_player(
        self,
        registry: RoomRegistry,
        notifier: RecordingNotifier,
        make_room: Callable[..., Room],
    ) -> None:
        """Test a new key gets a seat and a private welcome."""
        room = make_room(players=1)
        notifier.clear()

        player = registry.presence.join(room, player_key="k2", session_id="s2", nickname="  Bob  ")

        assert player.nickname == "Bob"
        assert len(room.roster) == 2
        assert not player.is_host
        assert "Bob has joined the game." in notifier.notices()
        assert notifier.for_session("s2", "joined_room")[0]["player_id"] == "s2"
        assert notifier.for_session("s2", "drawing_history")[0]["entries"] == []
        assert notifier.events("room_state")

    async def test_room_full(self, registry: RoomRegistry, make_room: Callable[..., Room]) -> None:
        """Test capacity counts every seat."""
        room = make_room(players=2, max_players=2)

        with pytest.raises(RoomFullError):
            registry.presence.join(room, player_key="k3", session_id="s3", nickname="Carol")
        assert len(room.roster) == 2

    async def test_session_holds_one_seat(self, registry: RoomRegistry, make_room: Callable[..., Room]) -> None:
        """Test a session seated under one key cannot add a seat under another."""
        room = make_room(players=2)

        with pytest.raises(GameStateError):
            registry.presence.join(room, player_key="k9", session_id="s2", nickname="Eve")
        assert [p.session_id for p in room.roster] == ["s1", "s2"]

    async def test_disconnected_seat_counts_toward_capacity(
        self,
        registry: RoomRegistry,
        make_room: Callable[..., Room],
    ) -> None:
        """Test a seat held during the grace period still blocks new players."""
        room = make_room(players=2, max_players=2)
        registry.presence.disconnect(room, "s2")

        with pytest.raises(RoomFullError):
            registry.presence.join(room, player_key="k3", session_id="s3", nickname="Carol")

    async def test_invalid_nickname(self, registry: RoomRegistry, make_room: Callable[..., Room]) -> None:
        """Test blank nicknames are rejected."""
        room = make_room(players=1)

        with pytest.raises(InvalidSettingsError):
            registry.presence.join(room, player_key="k2", session_id="s2", nickname="   ")

    async def test_late_joiner_catches_up(
        self,
        registry: RoomRegistry,
        notifier: RecordingNotifier,
        make_room: Callable[..., Room],
    ) -> None:
        """Test joining mid-round delivers the drawing and the masked word."""
        room = make_room(players=2)
        start_playing(registry, room)
        registry.engine.apply_drawing(room, "s1", Fill(x=5, y=5))
        notifier.clear()

        registry.presence.join(room, player_key="k3", session_id="s3", nickname="Carol")

        history = [e for e in notifier.envelopes if e.event.type == "drawing_history"]
        assert history[0].recipient == "s3"
        assert len(history[0].event.entries) == 1
        hints = [e for e in notifier.envelopes if e.event.type == "word_hint"]
        assert [(e.recipient, e.event.hint) for e in hints] == [("s3", "_____")]


class TestDisconnect:
    """Test disconnects, grace periods and reconnection."""

    async def test_disconnect_keeps_seat(
        self,
        registry: RoomRegistry,
        notifier: RecordingNotifier,
        make_room: Callable[..., Room],
    ) -> None:
        """Test a disconnected player keeps their seat and a removal timer is armed."""
        room = make_room(players=2)

        player = registry.presence.disconnect(room, "s2")

        assert player is not None
        assert player.connected is False
        assert len(room.roster) == 2
        assert room.timers.is_armed(removal_slot("k2"))
        assert "Player2 has disconnected." in notifier.notices()

    async def test_unknown_session_disconnect(self, registry: RoomRegistry, make_room: Callable[..., Room]) -> None:
        """Test disconnecting a session without a seat does nothing."""
        room = make_room(players=2)

        assert registry.presence.disconnect(room, "nobody") is None

    async def test_reconnect_restores_seat(
        self,
        registry: RoomRegistry,
        notifier: RecordingNotifier,
        make_room: Callable[..., Room],
    ) -> None:
        """Test rejoining with the same key inside the grace period keeps the score."""
        room = make_room(players=2)
        room.roster[1].score = 120
        registry.presence.disconnect(room, "s2")
        notifier.clear()

        player = registry.presence.join(room, player_key="k2", session_id="s2b", nickname="ignored")

        assert player.session_id == "s2b"
        assert player.connected is True
        assert player.score == 120
        assert player.nickname == "Player2"
        assert len(room.roster) == 2
        assert not room.timers.is_armed(removal_slot("k2"))
        assert "Player2 has reconnected." in notifier.notices()

    async def test_reconnect_restores_guessed_state(
        self,
        registry: RoomRegistry,
        make_room: Callable[..., Room],
    ) -> None:
        """Test a player who already guessed stays solved after reconnecting."""
        room = make_room(players=3)
        start_playing(registry, room)
        registry.engine.submit_guess(room, "s2", "apple")
        registry.presence.disconnect(room, "s2")
        assert "s2" not in room.state.guessed_ids

        registry.presence.join(room, player_key="k2", session_id="s2b", nickname="Player2")

        assert room.state.guessed_ids == ["s2b"]
        assert registry.engine.submit_guess(room, "s2b", "apple") is False

    async def test_expiry_removes_player(
        self,
        registry: RoomRegistry,
        make_room: Callable[..., Room],
    ) -> None:
        """Test the removal timer drops the seat."""
        room = make_room(players=3)
        registry.presence.disconnect(room, "s3")

        registry.presence._expire(room, "k3")

        assert [p.key for p in room.roster] == ["k1", "k2"]

    async def test_expiry_after_reconnect_is_ignored(
        self,
        registry: RoomRegistry,
        make_room: Callable[..., Room],
    ) -> None:
        """Test a stale removal does not drop a reconnected player."""
        room = make_room(players=2)
        registry.presence.disconnect(room, "s2")
        registry.presence.join(room, player_key="k2", session_id="s2b", nickname="Player2")

        registry.presence._expire(room, "k2")

        assert len(room.roster) == 2

    async def test_expiry_adjusts_turn(self, registry: RoomRegistry, make_room: Callable[..., Room]) -> None:
        """Test removing a seat before the current turn keeps the rotation in place."""
        room = make_room(players=3)
        room.state.turn = 2
        registry.presence.disconnect(room, "s1")

        registry.presence._expire(room, "k1")

        assert room.state.turn == 1

    async def test_last_removal_destroys_room(
        self,
        registry: RoomRegistry,
        make_room: Callable[..., Room],
    ) -> None:
        """Test the room disappears once its last seat is removed."""
        room = make_room(players=1)
        registry.presence.disconnect(room, "s1")
        assert room.code in registry

        registry.presence._expire(room, "k1")

        assert room.code not in registry
        assert room.closed


class TestHostAndDrawerFailover:
    """Test what happens when the host or drawer leaves."""

    async def test_host_is_promoted(
        self,
        registry: RoomRegistry,
        notifier: RecordingNotifier,
        make_room: Callable[..., Room],
    ) -> None:
        """Test the next connected player becomes host."""
        room = make_room(players=3)

        registry.presence.disconnect(room, "s1")

        assert room.roster.host is room.roster[1]
        assert not room.roster[0].is_host
        assert "Player2 is now the host." in notifier.notices()

    async def test_host_promotion_skips_disconnected(
        self,
        registry: RoomRegistry,
        notifier: RecordingNotifier,
        make_room: Callable[..., Room],
    ) -> None:
        """Test the host flag passes over a disconnected seat to the next connected one."""
        room = make_room(players=3)

        registry.presence.disconnect(room, "s2")
        registry.presence.disconnect(room, "s1")

        assert room.roster.host is room.roster[2]
        assert [p.is_host for p in room.roster] == [False, False, True]
        assert "Player3 is now the host." in notifier.notices()

    async def test_drawer_leaving_ends_round(
        self,
        registry: RoomRegistry,
        notifier: RecordingNotifier,
        make_room: Callable[..., Room],
    ) -> None:
        """Test the round ends when the drawer disconnects mid-drawing."""
        room = make_room(players=3)
        start_playing(registry, room)

        registry.presence.disconnect(room, "s1")

        assert room.state.status == RoundStatus.ENDED_ROUND
        assert room.state.drawer_id is None
        assert DRAWER_LEFT_NOTICE in notifier.notices()
        assert notifier.events("round_ended")[-1]["reason"] == "drawer_left"

    async def test_drawer_leaving_while_choosing(
        self,
        registry: RoomRegistry,
        make_room: Callable[..., Room],
    ) -> None:
        """Test the turn is abandoned when the drawer leaves before choosing."""
        room = make_room(players=3)
        registry.engine.start_game(room, "s1")

        registry.presence.disconnect(room, "s1")

        assert room.state.status == RoundStatus.ENDED_ROUND
        assert room.state.choices == []

    async def test_too_few_players_ends_game(
        self,
        registry: RoomRegistry,
        notifier: RecordingNotifier,
        make_room: Callable[..., Room],
    ) -> None:
        """Test the game ends when fewer than two players remain connected."""
        room = make_room(players=2)
        start_playing(registry, room)

        registry.presence.disconnect(room, "s2")

        assert room.state.status == RoundStatus.ENDED
        assert "Not enough players to continue." in notifier.notices()
        assert room.final_scores
        assert room.timers.is_armed(removal_slot("k2"))

    async def test_lobby_disconnect_does_not_end_game(
        self,
        registry: RoomRegistry,
        make_room: Callable[..., Room],
    ) -> None:
        """Test a disconnect in the lobby leaves the room waiting."""
        room = make_room(players=2)

        registry.presence.disconnect(room, "s2")

        assert room.state.status == RoundStatus.WAITING
