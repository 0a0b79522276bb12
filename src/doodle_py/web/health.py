"""Health check endpoints for doodle-py.

Provides /health and /ready endpoints for container orchestration
and load balancer health checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

from litestar import Controller, get

from doodle_py import __version__

if TYPE_CHECKING:
    from litestar import Request


class HealthStatus(str, Enum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of an individual component."""

    name: str
    status: HealthStatus
    message: str | None = None
    details: dict[str, int] = field(default_factory=dict)


@dataclass
class HealthResponse:
    """Health check response."""

    status: HealthStatus
    version: str = __version__
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    components: list[ComponentHealth] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "version": self.version,
            "timestamp": self.timestamp,
            "components": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    **c.details,
                }
                for c in self.components
            ],
        }


@dataclass
class ReadyResponse:
    """Readiness check response."""

    ready: bool
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    checks: dict[str, bool] = field(default_factory=dict)


class HealthController(Controller):
    """Health check controller.

    Provides endpoints for liveness and readiness checks used by
    container orchestration systems like Kubernetes.
    """

    path = ""
    include_in_schema: ClassVar[bool] = True
    tags: ClassVar[list[str]] = ["Health"]

    @get("/health")
    async def health(self, request: Request) -> dict:
        """Liveness check endpoint.

        Returns:
            Health status with room and connection counts.
        """
        components = [
            ComponentHealth(
                name="application",
                status=HealthStatus.HEALTHY,
                message="Application is running",
            )
        ]

        components.append(self._check_rooms(request))
        components.append(self._check_websocket(request))

        statuses = [c.status for c in components]
        if HealthStatus.UNHEALTHY in statuses:
            overall_status = HealthStatus.UNHEALTHY
        elif HealthStatus.DEGRADED in statuses:
            overall_status = HealthStatus.DEGRADED
        else:
            overall_status = HealthStatus.HEALTHY

        return HealthResponse(status=overall_status, components=components).to_dict()

    @get("/ready")
    async def ready(self, request: Request) -> dict:
        """Readiness check endpoint.

        Returns:
            Readiness status with individual check results.
        """
        checks = {
            "application": True,
            "room_registry": getattr(request.app.state, "room_registry", None) is not None,
        }
        response = ReadyResponse(ready=all(checks.values()), checks=checks)
        return {
            "ready": response.ready,
            "timestamp": response.timestamp,
            "checks": response.checks,
        }

    @staticmethod
    def _check_rooms(request: Request) -> ComponentHealth:
        """Check the room registry.

        Without a registry no game can be served, so the app is unhealthy.
        """
        registry = getattr(request.app.state, "room_registry", None)
        if registry is None:
            return ComponentHealth(
                name="rooms",
                status=HealthStatus.UNHEALTHY,
                message="Room registry not initialized",
            )
        return ComponentHealth(
            name="rooms",
            status=HealthStatus.HEALTHY,
            details={"rooms": len(registry)},
        )

    @staticmethod
    def _check_websocket(request: Request) -> ComponentHealth:
        """Check the session gateway behind the game WebSocket."""
        gateway = getattr(request.app.state, "session_gateway", None)
        if gateway is None:
            return ComponentHealth(
                name="websocket",
                status=HealthStatus.DEGRADED,
                message="Session gateway not initialized",
            )
        return ComponentHealth(
            name="websocket",
            status=HealthStatus.HEALTHY,
            details={"connections": gateway.connection_count},
        )
