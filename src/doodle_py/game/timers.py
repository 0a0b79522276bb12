"""Per-room timer slots.

Every timer of a room lives in a named slot. Arming a slot cancels whatever
was armed there before, so a room can never hold two word-choice timeouts
or two tick loops at once. When a timer fires it re-enters the room through
the room lock, and it only runs its callback if it is still the timer armed
in its slot and the room has not been closed.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

logger = structlog.get_logger(__name__)


class TimerSlot(StrEnum):
    """Slots for the timers that belong to a round phase."""

    WORD_CHOICE = "word_choice"
    TICK = "tick"
    ROUND_END = "round_end"


PHASE_SLOTS: tuple[TimerSlot, ...] = (TimerSlot.WORD_CHOICE, TimerSlot.TICK, TimerSlot.ROUND_END)


def removal_slot(player_key: str) -> str:
    """Slot name of the disconnect grace timer for a player."""
    return f"removal:{player_key}"


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


@dataclass(eq=False)
class TimerHandle:
    """A scheduled callback owned by a room."""

    slot: str
    delay: float
    task: asyncio.Task = field(repr=False)

    @property
    def active(self) -> bool:
        """Whether the timer can still fire."""
        return not self.task.done()

    def cancel(self) -> None:
        """Stop the timer unless it is the one currently running."""
        if self.task is not _current_task():
            self.task.cancel()


class RoomTimers:
    """Owns every pending timer of a single room.

    Attributes:
        room_code: Code of the owning room, used in log events.
        closed: Set once the room has been destroyed; nothing can be armed afterwards.
    """

    def __init__(self, room_code: str, lock: asyncio.Lock) -> None:
        """Initialize the timer registry.

        Args:
            room_code: Code of the owning room.
            lock: The room lock that serializes all room mutations.
        """
        self.room_code = room_code
        self.closed = False
        self._lock = lock
        self._handles: dict[str, TimerHandle] = {}

    def arm(
        self,
        slot: str,
        delay: float,
        callback: Callable[[], None],
        *,
        repeat: bool = False,
    ) -> TimerHandle:
        """Schedule ``callback`` in ``slot``, replacing any timer already there.

        Must be called from inside the room's serialized context, with an
        event loop running.

        Args:
            slot: Slot name.
            delay: Seconds until the callback fires (and between repeats).
            callback: Synchronous callback run under the room lock.
            repeat: Keep firing every ``delay`` seconds until cancelled.

        Returns:
            Handle for the new timer.

        Raises:
            RuntimeError: If the room has been closed.
        """
        if self.closed:
            msg = f"Cannot arm {slot} timer on closed room {self.room_code}"
            raise RuntimeError(msg)
        self.cancel(slot)
        task = asyncio.get_running_loop().create_task(
            self._run(slot, delay, callback, repeat=repeat),
            name=f"room-{self.room_code}-{slot}",
        )
        handle = TimerHandle(slot=slot, delay=delay, task=task)
        self._handles[slot] = handle
        logger.debug("Timer armed", room_code=self.room_code, slot=slot, delay=delay, repeat=repeat)
        return handle

    def cancel(self, slot: str) -> bool:
        """Cancel the timer in ``slot``.

        Returns:
            True if a timer was armed there.
        """
        handle = self._handles.pop(slot, None)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_phase(self) -> None:
        """Cancel the word-choice, tick and round-end timers."""
        for slot in PHASE_SLOTS:
            self.cancel(slot)

    def close(self) -> list[asyncio.Task]:
        """Cancel every timer and refuse new ones.

        Returns:
            The cancelled tasks, so a caller can wait for them to finish.
        """
        self.closed = True
        tasks = [handle.task for handle in self._handles.values() if handle.task is not _current_task()]
        for slot in list(self._handles):
            self.cancel(slot)
        return tasks

    def is_armed(self, slot: str) -> bool:
        """Whether a live timer occupies ``slot``."""
        handle = self._handles.get(slot)
        return handle is not None and handle.active

    @property
    def armed_slots(self) -> list[str]:
        """Names of all slots holding a live timer."""
        return [slot for slot, handle in self._handles.items() if handle.active]

    async def _run(self, slot: str, delay: float, callback: Callable[[], None], *, repeat: bool) -> None:
        while True:
            await asyncio.sleep(delay)
            async with self._lock:
                handle = self._handles.get(slot)
                if self.closed or handle is None or handle.task is not asyncio.current_task():
                    logger.debug("Discarding stale timer", room_code=self.room_code, slot=slot)
                    return
                if not repeat:
                    del self._handles[slot]
                try:
                    callback()
                except Exception:
                    logger.exception("Timer callback failed", room_code=self.room_code, slot=slot)
                    if self._handles.get(slot) is handle:
                        del self._handles[slot]
                    return
                if not repeat or self._handles.get(slot) is not handle:
                    return
