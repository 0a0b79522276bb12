"""Business logic services for doodle-py."""

from doodle_py.services.engine import RoundEngine
from doodle_py.services.presence import PresenceSupervisor
from doodle_py.services.registry import RoomRegistry

__all__ = ["PresenceSupervisor", "RoomRegistry", "RoundEngine"]
