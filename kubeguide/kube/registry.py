"""Registry of the resource kinds the cluster currently serves.

The registry holds exactly one completed discovery pass at a time, keyed by
identity triple, behind a read-only mapping. A rebuild builds a brand new
map and swaps the reference in a single assignment, so a reader sees either
the previous pass or the new one, never a mixture.

States::

    EMPTY --discover ok--> FRESH --ttl elapsed--> STALE --discover ok--> FRESH
                                                  STALE --discover fails--> STALE

Concurrent rebuild requests are collapsed: while a pass is running every
caller awaits that same task instead of starting its own.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Mapping
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Protocol

from kubeguide.kube.errors import DiscoveryError, NotFoundError
from kubeguide.models.resources import KindRef, RegistryState, ResourceDescriptor, ResourceRef
from kubeguide.observability.logging import get_logger
from kubeguide.observability.metrics import (
    discovery_duration_seconds,
    discovery_passes_total,
    registry_kinds,
)

_log = get_logger("kube.registry")

_DEFAULT_TTL = timedelta(minutes=5)


class Discoverer(Protocol):
    async def discover(self) -> Mapping[ResourceRef, ResourceDescriptor]: ...


class ResourceRegistry:
    """TTL-refreshed map from identity triple to descriptor.

    Args:
        engine:               Anything with an async ``discover()`` returning
                              the full descriptor map.
        ttl:                  Age after which the next lookup rebuilds.
        clock:                Monotonic seconds source; injected by tests.
        serve_stale_on_error: When an automatic rebuild fails and a previous
                              pass exists, keep serving it instead of raising.
    """

    def __init__(
        self,
        engine: Discoverer,
        ttl: timedelta = _DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
        serve_stale_on_error: bool = True,
    ) -> None:
        self._engine = engine
        self._ttl = ttl.total_seconds()
        self._clock = clock
        self._serve_stale_on_error = serve_stale_on_error
        self._descriptors: Mapping[ResourceRef, ResourceDescriptor] = MappingProxyType({})
        self._built_at: float | None = None
        self._inflight: asyncio.Task[None] | None = None

    @property
    def built_at(self) -> float | None:
        return self._built_at

    @property
    def size(self) -> int:
        return len(self._descriptors)

    def state(self) -> RegistryState:
        if self._built_at is None:
            return RegistryState.EMPTY
        if self._clock() - self._built_at > self._ttl:
            return RegistryState.STALE
        return RegistryState.FRESH

    def is_stale(self) -> bool:
        return self.state() is not RegistryState.FRESH

    # ------------------------------------------------------------------
    # Rebuild
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Force a full discovery pass and replace the map.

        Joins the pass already in flight when there is one. On failure the
        previous map and timestamp are left untouched and the error is
        raised to every caller waiting on the pass.

        Raises:
            DiscoveryError: the discovery pass failed.
        """
        task = self._inflight
        if task is None:
            task = asyncio.get_running_loop().create_task(self._rebuild(), name="registry-refresh")
            self._inflight = task
            task.add_done_callback(self._clear_inflight)
        # Shielded so a cancelled waiter does not abort the pass for the others.
        await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task[None]) -> None:
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled():
            # Mark the exception retrieved even if every waiter was cancelled.
            task.exception()

    async def _rebuild(self) -> None:
        started = time.perf_counter()
        try:
            discovered = await self._engine.discover()
        except Exception as exc:
            discovery_passes_total.labels(outcome="error").inc()
            _log.error("discovery_pass_failed", error=str(exc), state=self.state().value)
            if isinstance(exc, DiscoveryError):
                raise
            raise DiscoveryError(f"resource discovery failed: {exc}") from exc

        descriptors = MappingProxyType(dict(discovered))
        self._descriptors = descriptors
        self._built_at = self._clock()

        elapsed = time.perf_counter() - started
        custom = sum(1 for d in descriptors.values() if d.is_custom)
        discovery_passes_total.labels(outcome="ok").inc()
        discovery_duration_seconds.observe(elapsed)
        registry_kinds.labels(origin="builtin").set(len(descriptors) - custom)
        registry_kinds.labels(origin="custom").set(custom)
        _log.info(
            "discovery_pass_completed",
            kinds=len(descriptors),
            custom=custom,
            duration_ms=round(elapsed * 1000.0, 1),
        )

    async def _ensure_fresh(self) -> None:
        if self.state() is RegistryState.FRESH:
            return
        has_previous_pass = self._built_at is not None
        try:
            await self.refresh()
        except DiscoveryError as exc:
            if not has_previous_pass or not self._serve_stale_on_error:
                raise
            _log.warning("registry_serving_stale", error=str(exc), kinds=len(self._descriptors))

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def get(self, ref: ResourceRef) -> ResourceDescriptor:
        """Return the descriptor for *ref*, rebuilding first if stale.

        Raises:
            NotFoundError:  *ref* is not served by the cluster.
            DiscoveryError: the registry could not be built.
        """
        await self._ensure_fresh()
        descriptor = self._descriptors.get(ref)
        if descriptor is None:
            raise NotFoundError(ref)
        return descriptor

    async def exists(self, ref: ResourceRef) -> bool:
        try:
            await self.get(ref)
        except (NotFoundError, DiscoveryError):
            return False
        return True

    async def kind_for(self, ref: ResourceRef) -> KindRef:
        return (await self.get(ref)).kind

    async def list_all(self) -> frozenset[ResourceDescriptor]:
        await self._ensure_fresh()
        return frozenset(self._descriptors.values())

    async def list_custom(self) -> frozenset[ResourceDescriptor]:
        return frozenset(d for d in await self.list_all() if d.is_custom)

    def describe(self) -> dict[str, Any]:
        """Summary used by the CLI and status displays; never triggers I/O."""
        return {
            "state": self.state().value,
            "kinds": len(self._descriptors),
            "custom": sum(1 for d in self._descriptors.values() if d.is_custom),
            "ttl_seconds": self._ttl,
        }
