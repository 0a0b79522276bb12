"""Minimal example showing doodle-py usage with Litestar.

This example demonstrates how to create a basic Litestar application with
doodle-py integration using the plugin system.

The application will:
    - Create a room registry with the built-in word list
    - Mount the room API at /api and the game WebSocket at /ws/play
    - Shorten the reconnection grace period to 10 seconds

Running the Application:
    python examples/app.py

Then visit:
    - http://127.0.0.1:8000/schema - OpenAPI documentation
    - http://127.0.0.1:8000/api/rooms - Public rooms

Example WebSocket session (using websocat):
    websocat ws://127.0.0.1:8000/ws/play
    {"type": "create_room", "room_name": "Lobby", "player_key": "k1", "nickname": "Ada"}
"""

from __future__ import annotations

from litestar import Litestar

from doodle_py import DoodleConfig, DoodlePlugin, EngineTimings
from doodle_py.core.logging import configure_logging

configure_logging(debug=True)

app = Litestar(
    plugins=[
        DoodlePlugin(
            DoodleConfig(
                # Mount room routes at /api
                api_path="/api",
                # Game socket lives at /ws/play
                ws_path="/ws",
                timings=EngineTimings(disconnect_grace=10.0),
            )
        )
    ],
    debug=True,
)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="127.0.0.1",
        port=8000,
        log_level="info",
    )
