"""Web layer for the doodle-py API."""

from doodle_py.web.game_controllers import RoomController
from doodle_py.web.health import HealthController

__all__ = ["HealthController", "RoomController"]
