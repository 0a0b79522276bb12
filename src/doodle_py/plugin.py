"""Litestar plugin for doodle-py integration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from litestar.di import Provide
from litestar.plugins import InitPluginProtocol

from doodle_py.core.config import EngineTimings
from doodle_py.game.wordbank import WordBank
from doodle_py.realtime.gateway import SessionGateway
from doodle_py.services.registry import RoomRegistry

if TYPE_CHECKING:
    from pathlib import Path

    from litestar import Litestar
    from litestar.config.app import AppConfig

logger = structlog.get_logger(__name__)


@dataclass
class DoodleConfig:
    """Configuration for the Doodle plugin.

    Attributes:
        api_path: Base path for mounting the REST API. Defaults to "/api".
        ws_path: Base path for WebSocket routes. Defaults to "/ws".
        enable_api: Whether to mount the REST API routes. Defaults to True.
        enable_websocket: Whether to mount the game WebSocket. Defaults to True.
        timings: Timer delays for every room. If None, the default timings
            are used.
        word_bank: Word source shared by all rooms. If None, the built-in
            word list is used.
        words_file: Optional newline-delimited word list loaded into the
            word bank at startup.

    Example:
        >>> config = DoodleConfig(
        ...     api_path="/api/v1", timings=EngineTimings(disconnect_grace=30.0)
        ... )
    """

    api_path: str = "/api"
    ws_path: str = "/ws"
    enable_api: bool = True
    enable_websocket: bool = True
    timings: EngineTimings | None = None
    word_bank: WordBank | None = None
    words_file: str | Path | None = None


class DoodlePlugin(InitPluginProtocol):
    """Litestar plugin wiring the game engine into an application.

    Creates one room registry and session gateway per application, registers
    them for dependency injection under ``room_registry`` and
    ``session_gateway``, mounts the room API and the game WebSocket, and
    closes every room on shutdown.

    Example:
        >>> from litestar import Litestar
        >>> from doodle_py import DoodleConfig, DoodlePlugin
        >>>
        >>> app = Litestar(plugins=[DoodlePlugin(DoodleConfig())])
    """

    def __init__(self, config: DoodleConfig | None = None) -> None:
        """Initialize the plugin with optional configuration.

        Args:
            config: Plugin configuration. If None, DoodleConfig with default
                values will be used.
        """
        self._config = config or DoodleConfig()
        self._registry: RoomRegistry | None = None
        self._gateway: SessionGateway | None = None

    def on_app_init(self, app_config: AppConfig) -> AppConfig:
        """Set up the registry, gateway, routes and lifecycle hooks.

        Args:
            app_config: The Litestar application configuration object.

        Returns:
            The modified application configuration.
        """
        word_bank = self._config.word_bank or WordBank()
        if self._config.words_file is not None:
            word_bank.load_words_from_file(self._config.words_file)

        self._registry = RoomRegistry(word_bank=word_bank, timings=self._config.timings)
        self._gateway = SessionGateway(self._registry)

        def provide_room_registry() -> RoomRegistry:
            """Dependency provider for RoomRegistry."""
            return self.registry

        def provide_session_gateway() -> SessionGateway:
            """Dependency provider for SessionGateway."""
            return self.gateway

        app_config.dependencies["room_registry"] = Provide(provide_room_registry, sync_to_thread=False)
        app_config.dependencies["session_gateway"] = Provide(provide_session_gateway, sync_to_thread=False)

        if self._config.enable_api:
            from litestar import Router

            from doodle_py.web.game_controllers import RoomController

            app_config.route_handlers.append(
                Router(path=self._config.api_path, route_handlers=[RoomController]),
            )

        if self._config.enable_websocket:
            from doodle_py.realtime.game_handler import create_game_websocket_handler

            game_ws_router, _ = create_game_websocket_handler(path=self._config.ws_path, gateway=self._gateway)
            app_config.route_handlers.append(game_ws_router)

        app_config.on_startup.append(self._on_startup)
        app_config.on_shutdown.append(self._on_shutdown)
        return app_config

    def _on_startup(self, app: Litestar) -> None:
        app.state.room_registry = self.registry
        app.state.session_gateway = self.gateway
        logger.info("Doodle plugin started", words=len(self.registry.word_bank))

    async def _on_shutdown(self, app: Litestar) -> None:
        await self.registry.shutdown()

    @property
    def registry(self) -> RoomRegistry:
        """Get the room registry.

        Raises:
            RuntimeError: If the plugin has not been initialized yet
                (on_app_init not called).
        """
        if self._registry is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._registry

    @property
    def gateway(self) -> SessionGateway:
        """Get the session gateway.

        Raises:
            RuntimeError: If the plugin has not been initialized yet
                (on_app_init not called).
        """
        if self._gateway is None:
            msg = "Plugin not initialized. Call on_app_init first."
            raise RuntimeError(msg)
        return self._gateway
