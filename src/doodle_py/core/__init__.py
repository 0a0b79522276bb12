"""Configuration, logging and HTTP error handling for doodle-py."""

from doodle_py.core.config import AppSettings, EngineTimings

__all__ = ["AppSettings", "EngineTimings"]
