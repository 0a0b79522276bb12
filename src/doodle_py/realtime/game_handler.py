"""WebSocket handler for real-time game communication."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any
from uuid import uuid4

import structlog
from litestar import WebSocket
from litestar.exceptions import WebSocketDisconnect

from doodle_py.game.events import ErrorNotice

if TYPE_CHECKING:
    from litestar import Router

    from doodle_py.realtime.gateway import SessionGateway

logger = structlog.get_logger(__name__)


class QueueSink:
    """Connection sink backed by an unbounded queue.

    The gateway puts payloads from inside room locks; a writer task drains
    the queue to the socket so a slow client never blocks a room.
    """

    def __init__(self) -> None:
        self.queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue()

    def send(self, payload: dict[str, Any]) -> None:
        self.queue.put_nowait(payload)

    def close(self) -> None:
        """Signal the writer to stop."""
        self.queue.put_nowait(None)


class GameWebSocketHandler:
    """Handler for game WebSocket connections.

    Each accepted socket gets a fresh session id. Inbound frames are decoded
    and handed to the gateway; outbound events are written by a per-socket
    writer task.
    """

    def __init__(self, gateway: SessionGateway) -> None:
        """Initialize the game WebSocket handler.

        Args:
            gateway: The session gateway.
        """
        self._gateway = gateway

    @property
    def gateway(self) -> SessionGateway:
        """The session gateway."""
        return self._gateway

    async def handle_connection(self, socket: WebSocket) -> None:
        """Handle a WebSocket connection until it closes.

        Args:
            socket: The WebSocket connection.
        """
        await socket.accept()
        session_id = uuid4().hex
        sink = QueueSink()
        self._gateway.connect(session_id, sink)
        writer = asyncio.create_task(self._write_loop(socket, sink, session_id))

        logger.debug("WebSocket connection accepted", session_id=session_id)

        try:
            await self._receive_loop(socket, session_id, sink)
        except WebSocketDisconnect:
            pass
        except Exception:
            logger.exception("WebSocket error", session_id=session_id)
        finally:
            await self._gateway.disconnect(session_id)
            sink.close()
            await asyncio.gather(writer, return_exceptions=True)
            logger.debug("WebSocket connection closed", session_id=session_id)

    async def _receive_loop(self, socket: WebSocket, session_id: str, sink: QueueSink) -> None:
        """Main receive loop for WebSocket messages.

        Args:
            socket: The WebSocket connection.
            session_id: Session bound to this socket.
            sink: Outbound queue of this socket.
        """
        async for message in socket.iter_data():
            try:
                data = json.loads(message)
            except (json.JSONDecodeError, UnicodeDecodeError):
                sink.send(ErrorNotice(code="invalid_json", message="Invalid JSON message").to_dict())
                continue
            await self._gateway.handle_raw(session_id, data)

    async def _write_loop(self, socket: WebSocket, sink: QueueSink, session_id: str) -> None:
        """Drain the outbound queue to the socket.

        Args:
            socket: The WebSocket connection.
            sink: Outbound queue of this socket.
            session_id: Session bound to this socket.
        """
        while True:
            payload = await sink.queue.get()
            if payload is None:
                return
            try:
                await socket.send_json(payload)
            except Exception:
                logger.debug("Failed to send message", session_id=session_id, event=payload.get("type"))
                return


def create_game_websocket_handler(
    path: str,
    gateway: SessionGateway,
) -> tuple[Router, GameWebSocketHandler]:
    """Create a WebSocket router for game real-time communication.

    Args:
        path: Base path for WebSocket routes.
        gateway: The session gateway.

    Returns:
        A tuple of (Litestar Router, GameWebSocketHandler instance).
    """
    from litestar import Router, websocket

    handler = GameWebSocketHandler(gateway)

    @websocket(path="/play")
    async def play_websocket(socket: WebSocket) -> None:
        """WebSocket endpoint for playing.

        Args:
            socket: The WebSocket connection.
        """
        await handler.handle_connection(socket)

    router = Router(
        path=path,
        route_handlers=[play_websocket],
        tags=["Game WebSocket"],
    )
    return router, handler
