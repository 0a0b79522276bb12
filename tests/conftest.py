"""Pytest configuration and fixtures for doodle-py tests."""

from __future__ import annotations

import random
from functools import partial
from typing import TYPE_CHECKING, Any

import pytest
from litestar.testing import TestClient

from doodle_py.app import create_app
from doodle_py.core.config import EngineTimings
from doodle_py.game.models import RoomSettings
from doodle_py.game.wordbank import WordBank
from doodle_py.services.registry import RoomRegistry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator

    from litestar import Litestar

    from doodle_py.game.events import Envelope
    from doodle_py.game.models import Room

# Timers never fire on their own during a test with these delays; tests
# invoke the engine callbacks directly instead.
LONG_TIMINGS = EngineTimings(
    word_choice_timeout=600.0,
    tick_interval=600.0,
    round_end_delay=600.0,
    disconnect_grace=600.0,
)

TEST_WORDS = ["apple", "banana", "cherry", "grape", "lemon", "mango", "ice cream"]


class RecordingNotifier:
    """Notifier that keeps every published envelope."""

    def __init__(self) -> None:
        self.envelopes: list[Envelope] = []

    def publish(self, envelope: Envelope) -> None:
        self.envelopes.append(envelope)

    def clear(self) -> None:
        self.envelopes.clear()

    def events(self, event_type: str | None = None) -> list[dict[str, Any]]:
        """Serialized events, optionally filtered by wire type."""
        return [
            e.event.to_dict()
            for e in self.envelopes
            if event_type is None or e.event.type == event_type
        ]

    def for_session(self, session_id: str, event_type: str | None = None) -> list[dict[str, Any]]:
        """Events addressed to ``session_id`` directly or through a room-wide delivery."""
        return [
            e.event.to_dict()
            for e in self.envelopes
            if (e.recipient == session_id or (e.recipient is None and e.exclude != session_id))
            and (event_type is None or e.event.type == event_type)
        ]

    def notices(self) -> list[str]:
        """Contents of every system message."""
        return [e["content"] for e in self.events("system_message")]


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Create a fresh recording notifier."""
    return RecordingNotifier()


@pytest.fixture
def word_bank() -> WordBank:
    """Create a small deterministic word bank."""
    return WordBank(TEST_WORDS, rng=random.Random(1))


@pytest.fixture
async def registry(notifier: RecordingNotifier, word_bank: WordBank) -> AsyncIterator[RoomRegistry]:
    """Create a registry with long timers and close its rooms afterwards."""
    registry = RoomRegistry(
        word_bank=word_bank,
        timings=LONG_TIMINGS,
        notifier=notifier,
        rng=random.Random(42),
    )
    yield registry
    await registry.shutdown()


def _make_room(registry: RoomRegistry, players: int = 2, **settings: Any) -> Room:
    """Create a room hosted by ``s1`` and join ``s2``..``sN``.

    Player ``sN`` uses the durable key ``kN`` and the nickname ``PlayerN``.
    """
    room = registry.create_room(
        name="Test Room",
        player_key="k1",
        session_id="s1",
        nickname="Player1",
        settings=RoomSettings(**settings),
    )
    for n in range(2, players + 1):
        registry.presence.join(room, player_key=f"k{n}", session_id=f"s{n}", nickname=f"Player{n}")
    return room


@pytest.fixture
def make_room(registry: RoomRegistry) -> Callable[..., Room]:
    """Factory creating rooms in the test registry, see :func:`_make_room`."""
    return partial(_make_room, registry)


# App and client fixtures


@pytest.fixture
def app() -> Litestar:
    """Create the application with long timers."""
    return create_app(timings=LONG_TIMINGS, word_bank=WordBank(TEST_WORDS))


@pytest.fixture
def client(app: Litestar) -> Iterator[TestClient[Litestar]]:
    """Create a test client for the app."""
    with TestClient(app=app) as client:
        yield client
