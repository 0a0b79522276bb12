"""Tests for per-room timer slots."""

from __future__ import annotations

import asyncio

import pytest

from doodle_py.game.timers import RoomTimers, TimerSlot, removal_slot

DELAY = 0.01


@pytest.fixture
def lock() -> asyncio.Lock:
    """Create a room lock."""
    return asyncio.Lock()


@pytest.fixture
def timers(lock: asyncio.Lock) -> RoomTimers:
    """Create timers for a test room."""
    return RoomTimers("TEST01", lock)


class TestArm:
    """Test arming and firing timers."""

    async def test_fires_once(self, timers: RoomTimers) -> None:
        """Test a one-shot timer fires and frees its slot."""
        fired: list[str] = []

        timers.arm(TimerSlot.WORD_CHOICE, DELAY, lambda: fired.append("choice"))
        assert timers.is_armed(TimerSlot.WORD_CHOICE)
        await asyncio.sleep(DELAY * 5)

        assert fired == ["choice"]
        assert not timers.is_armed(TimerSlot.WORD_CHOICE)

    async def test_rearm_replaces(self, timers: RoomTimers) -> None:
        """Test arming an occupied slot cancels the earlier timer."""
        fired: list[str] = []

        timers.arm(TimerSlot.ROUND_END, DELAY, lambda: fired.append("first"))
        timers.arm(TimerSlot.ROUND_END, DELAY, lambda: fired.append("second"))
        await asyncio.sleep(DELAY * 5)

        assert fired == ["second"]

    async def test_repeat(self, timers: RoomTimers) -> None:
        """Test a repeating timer keeps firing until cancelled."""
        fired: list[int] = []

        timers.arm(TimerSlot.TICK, DELAY, lambda: fired.append(1), repeat=True)
        await asyncio.sleep(DELAY * 10)
        assert timers.cancel(TimerSlot.TICK)
        count = len(fired)
        await asyncio.sleep(DELAY * 5)

        assert count >= 2
        assert len(fired) == count

    async def test_waits_for_room_lock(self, timers: RoomTimers, lock: asyncio.Lock) -> None:
        """Test a due timer does not run while the room lock is held."""
        fired: list[str] = []

        async with lock:
            timers.arm(TimerSlot.WORD_CHOICE, DELAY, lambda: fired.append("choice"))
            await asyncio.sleep(DELAY * 5)
            assert fired == []
        await asyncio.sleep(DELAY)

        assert fired == ["choice"]

    async def test_callback_error_is_contained(self, timers: RoomTimers) -> None:
        """Test a failing callback frees its slot and leaves other timers alone."""
        fired: list[str] = []

        def explode() -> None:
            raise ValueError("boom")

        timers.arm(TimerSlot.TICK, DELAY, explode, repeat=True)
        timers.arm(TimerSlot.ROUND_END, DELAY * 2, lambda: fired.append("end"))
        await asyncio.sleep(DELAY * 6)

        assert not timers.is_armed(TimerSlot.TICK)
        assert fired == ["end"]


class TestCancel:
    """Test cancelling timers."""

    async def test_cancel(self, timers: RoomTimers) -> None:
        """Test a cancelled timer never fires."""
        fired: list[str] = []

        timers.arm(TimerSlot.WORD_CHOICE, DELAY, lambda: fired.append("choice"))
        assert timers.cancel(TimerSlot.WORD_CHOICE) is True
        assert timers.cancel(TimerSlot.WORD_CHOICE) is False
        await asyncio.sleep(DELAY * 5)

        assert fired == []

    async def test_cancel_phase_keeps_removals(self, timers: RoomTimers) -> None:
        """Test phase cancellation leaves disconnect grace timers armed."""
        timers.arm(TimerSlot.WORD_CHOICE, 60, lambda: None)
        timers.arm(TimerSlot.TICK, 60, lambda: None, repeat=True)
        timers.arm(removal_slot("k1"), 60, lambda: None)

        timers.cancel_phase()

        assert timers.armed_slots == [removal_slot("k1")]
        timers.close()

    async def test_close(self, timers: RoomTimers) -> None:
        """Test closing cancels everything and refuses new timers."""
        fired: list[str] = []
        timers.arm(TimerSlot.WORD_CHOICE, DELAY, lambda: fired.append("choice"))
        timers.arm(removal_slot("k1"), DELAY, lambda: fired.append("removal"))

        tasks = timers.close()
        await asyncio.gather(*tasks, return_exceptions=True)

        assert timers.closed
        assert timers.armed_slots == []
        assert fired == []
        with pytest.raises(RuntimeError):
            timers.arm(TimerSlot.TICK, DELAY, lambda: None)
