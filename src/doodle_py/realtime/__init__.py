"""Real-time WebSocket module for doodle-py.

Parses inbound client messages, dispatches them to the game services and
delivers outbound events to the connected sockets.
"""

from __future__ import annotations

from doodle_py.realtime.game_handler import GameWebSocketHandler, create_game_websocket_handler
from doodle_py.realtime.gateway import ConnectionSink, SessionGateway
from doodle_py.realtime.messages import InboundMessage, InboundType, parse_inbound

__all__ = [
    "ConnectionSink",
    "GameWebSocketHandler",
    "InboundMessage",
    "InboundType",
    "SessionGateway",
    "create_game_websocket_handler",
    "parse_inbound",
]
