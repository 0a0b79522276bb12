"""Ordered player collection of a room."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from doodle_py.game.models import Player


class PlayerRoster:
    """Players of a room in join order.

    Roster order decides drawer rotation and host failover. Players stay in
    the roster while disconnected and are only removed once their grace
    period runs out.
    """

    def __init__(self) -> None:
        self._players: list[Player] = []

    def __len__(self) -> int:
        return len(self._players)

    def __iter__(self) -> Iterator[Player]:
        return iter(list(self._players))

    def __getitem__(self, index: int) -> Player:
        return self._players[index]

    def add(self, player: Player) -> None:
        """Append a player at the end of the rotation."""
        self._players.append(player)

    def remove(self, player_key: str) -> int | None:
        """Remove a player by durable key.

        Returns:
            The position the player held, or None if absent.
        """
        for index, player in enumerate(self._players):
            if player.key == player_key:
                del self._players[index]
                return index
        return None

    def by_key(self, player_key: str) -> Player | None:
        """Find a player by durable key."""
        return next((p for p in self._players if p.key == player_key), None)

    def by_session(self, session_id: str | None) -> Player | None:
        """Find a player by current transport session."""
        if session_id is None:
            return None
        return next((p for p in self._players if p.session_id == session_id), None)

    @property
    def connected(self) -> list[Player]:
        """Connected players in roster order."""
        return [p for p in self._players if p.connected]

    def connected_count(self) -> int:
        """Number of connected players."""
        return sum(1 for p in self._players if p.connected)

    def guessers(self, drawer_id: str | None) -> list[Player]:
        """Connected players other than the drawer."""
        return [p for p in self._players if p.connected and p.session_id != drawer_id]

    @property
    def host(self) -> Player | None:
        """The player holding the host flag, if any."""
        return next((p for p in self._players if p.is_host), None)

    def next_connected_from(self, start: int) -> int | None:
        """Scan forward (wrapping) from ``start`` for a connected player.

        Returns:
            Roster position of the first connected player found, or None.
        """
        size = len(self._players)
        for offset in range(size):
            index = (start + offset) % size
            if self._players[index].connected:
                return index
        return None

    def promote(self, player: Player) -> None:
        """Make ``player`` the only host."""
        for p in self._players:
            p.is_host = p is player

    def ensure_host(self) -> Player | None:
        """Promote the first connected player if no connected player is host.

        Returns:
            The newly promoted player, or None if nothing changed.
        """
        if any(p.is_host and p.connected for p in self._players):
            return None
        candidate = next((p for p in self._players if p.connected), None)
        if candidate is not None:
            self.promote(candidate)
        return candidate

    def standings(self) -> list[Player]:
        """Players sorted by score, highest first; ties keep roster order."""
        return sorted(self._players, key=lambda p: p.score, reverse=True)

    def reset_scores(self) -> None:
        """Zero every player's score."""
        for player in self._players:
            player.score = 0
