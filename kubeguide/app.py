"""Application bootstrap for kubeguide.

Wires the resource core in dependency order:
config -> logging -> K8s connection -> discovery -> registry -> accessor

The first discovery pass runs during startup; a failure there is fatal
because nothing can be resolved without it. Shutdown closes the connection
pool and is safe to call on an app that never started.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

from kubeguide.config import load_config
from kubeguide.kube.accessor import UnifiedAccessor
from kubeguide.kube.connection import KubeConnection, open_connection
from kubeguide.kube.conversion import ObjectConverter
from kubeguide.kube.discovery import DiscoveryEngine
from kubeguide.kube.registry import ResourceRegistry
from kubeguide.kube.strategies import GenericFetcher, TypedFetcher
from kubeguide.models.config import KubeGuideConfig
from kubeguide.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog


class ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


def build_accessor(connection: Any, config: KubeGuideConfig) -> UnifiedAccessor:
    """Assemble discovery, registry, strategies and accessor on a connection."""
    timeout = float(config.accessor.request_timeout_seconds)
    registry = ResourceRegistry(
        DiscoveryEngine(connection, request_timeout=timeout),
        ttl=timedelta(seconds=config.registry.ttl_seconds),
        serve_stale_on_error=config.registry.serve_stale_on_error,
    )
    return UnifiedAccessor(
        registry=registry,
        typed=TypedFetcher(connection, request_timeout=timeout),
        generic=GenericFetcher(connection, request_timeout=timeout),
        converter=ObjectConverter(connection.api_client),
        generic_fallback=config.accessor.generic_fallback,
    )


class KubeGuideApp:
    """Application root. Owns the connection and the accessor built on it.

    ``stop()`` is idempotent: calling it on an app that was never started
    (or already stopped) is safe.
    """

    def __init__(self, config: KubeGuideConfig | None = None) -> None:
        self.config = config
        self._connection: KubeConnection | None = None
        self._accessor: UnifiedAccessor | None = None
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def accessor(self) -> UnifiedAccessor:
        if self._accessor is None:
            raise RuntimeError("kubeguide app is not started")
        return self._accessor

    async def start(self) -> None:
        """Start components in dependency order.

        Raises ComponentError if the connection or the first discovery pass
        fails; the connection is closed again in that case.
        """
        if self.config is None:
            self.config = load_config()
        setup_logging(self.config.log.level, self.config.log.format)
        self._log = get_logger("app")
        self._log.debug("kubeguide starting", version=_kubeguide_version())

        try:
            self._connection = await open_connection(self.config.cluster)
        except Exception as exc:
            raise ComponentError("k8s_connection", exc) from exc

        accessor = build_accessor(self._connection, self.config)
        try:
            await accessor.registry.refresh()
        except Exception as exc:
            await self.stop()
            raise ComponentError("registry", exc) from exc

        self._accessor = accessor
        self._log.debug("kubeguide started", **accessor.registry.describe())

    async def stop(self) -> None:
        self._accessor = None
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        log = self._log or get_logger("app")
        try:
            await connection.close()
        except Exception as exc:
            log.debug("k8s connection close raised (non-fatal)", error=str(exc))

    async def __aenter__(self) -> KubeGuideApp:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


def _kubeguide_version() -> str:
    from kubeguide import __version__

    return __version__
