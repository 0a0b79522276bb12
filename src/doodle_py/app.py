"""Main Litestar application for doodle-py.

This module provides the application factory and a configured app instance
for running doodle-py as a standalone server.
"""

from __future__ import annotations

from litestar import Litestar
from litestar.openapi import OpenAPIConfig

from doodle_py import DoodleConfig, DoodlePlugin, __version__
from doodle_py.core.config import AppSettings, EngineTimings
from doodle_py.core.error_handling import get_exception_handlers
from doodle_py.core.logging import configure_logging, get_middleware
from doodle_py.game.wordbank import WordBank
from doodle_py.web.health import HealthController


def create_app(
    *,
    enable_api: bool = True,
    enable_websocket: bool = True,
    debug: bool = False,
    json_logs: bool = False,
    timings: EngineTimings | None = None,
    word_bank: WordBank | None = None,
    words_file: str | None = None,
) -> Litestar:
    """Create and configure the Litestar application.

    Args:
        enable_api: Whether to enable the REST API routes.
        enable_websocket: Whether to enable the game WebSocket.
        debug: Whether to enable debug mode.
        json_logs: Whether to output logs as JSON (for production).
        timings: Timer delays for every room.
        word_bank: Word source shared by all rooms.
        words_file: Optional extra word list loaded at startup.

    Returns:
        Configured Litestar application instance.
    """
    configure_logging(debug=debug, json_logs=json_logs)

    plugin = DoodlePlugin(
        DoodleConfig(
            api_path="/api",
            ws_path="/ws",
            enable_api=enable_api,
            enable_websocket=enable_websocket,
            timings=timings,
            word_bank=word_bank,
            words_file=words_file,
        )
    )

    return Litestar(
        route_handlers=[HealthController],
        plugins=[plugin],
        debug=debug,
        middleware=get_middleware(),
        exception_handlers=get_exception_handlers(),
        openapi_config=OpenAPIConfig(
            title="doodle-py API",
            version=__version__,
            description="Multiplayer draw-and-guess game server",
            path="/schema",
            use_handler_docstrings=True,
        ),
    )


def create_app_from_env() -> Litestar:
    """Create the application from ``DOODLE_*`` environment variables."""
    settings = AppSettings.from_env()
    return create_app(
        debug=settings.debug,
        json_logs=settings.json_logs,
        timings=settings.timings,
        words_file=settings.words_file,
    )


# Default application instance for uvicorn
app = create_app_from_env()
