"""Shared fakes for kubeguide tests.

Nothing here talks to a cluster: CRDs are MagicMock stand-ins shaped like
``V1CustomResourceDefinition``, discovery is a scripted engine, and time is
a manually advanced clock.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from typing import Any
from unittest.mock import MagicMock

import pytest
from kubernetes_asyncio.client import ApiClient  # type: ignore[import-untyped]

from kubeguide.kube.conversion import ObjectConverter
from kubeguide.kube.discovery import BUILTIN_RESOURCES
from kubeguide.models.resources import KindRef, ResourceDescriptor, ResourceRef

POD_REF = ResourceRef("", "v1", "pods")
SERVICE_REF = ResourceRef("", "v1", "services")
CONFIGMAP_REF = ResourceRef("", "v1", "configmaps")
NAMESPACE_REF = ResourceRef("", "v1", "namespaces")
DEPLOYMENT_REF = ResourceRef("apps", "v1", "deployments")
WIDGET_REF = ResourceRef("example.io", "v1", "widgets")
GADGET_REF = ResourceRef("example.io", "v1", "gadgets")


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock advanced explicitly by the test."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# CRD helpers
# ---------------------------------------------------------------------------


def make_crd(
    plural: str,
    group: str,
    kind: str,
    versions: list[tuple[str, bool]] | None = None,
    scope: str = "Namespaced",
) -> MagicMock:
    """Build a CRD stand-in; *versions* is a list of (name, served)."""
    crd = MagicMock()
    crd.metadata.name = f"{plural}.{group}"
    crd.spec.group = group
    crd.spec.names.kind = kind
    crd.spec.names.plural = plural
    crd.spec.scope = scope
    crd_versions = []
    for name, served in versions or [("v1", True)]:
        ver = MagicMock()
        ver.name = name
        ver.served = served
        crd_versions.append(ver)
    crd.spec.versions = crd_versions
    return crd


def widget_descriptor(version: str = "v1", namespaced: bool = True) -> ResourceDescriptor:
    return ResourceDescriptor(
        ref=ResourceRef("example.io", version, "widgets"),
        kind=KindRef("example.io", version, "Widget"),
        namespaced=namespaced,
        is_custom=True,
    )


def gadget_descriptor() -> ResourceDescriptor:
    """A cluster-scoped custom kind."""
    return ResourceDescriptor(
        ref=GADGET_REF,
        kind=KindRef("example.io", "v1", "Gadget"),
        namespaced=False,
        is_custom=True,
    )


def default_descriptors() -> dict[ResourceRef, ResourceDescriptor]:
    descriptors = {d.ref: d for d in BUILTIN_RESOURCES}
    for extra in (widget_descriptor(), gadget_descriptor()):
        descriptors[extra.ref] = extra
    return descriptors


# ---------------------------------------------------------------------------
# Discovery engine
# ---------------------------------------------------------------------------


class FakeDiscoveryEngine:
    """Scripted discovery: returns ``result`` or raises ``error``.

    When ``gate`` is set, every pass blocks on it, which lets tests pile up
    concurrent callers while one pass is in flight.
    """

    def __init__(self, result: Mapping[ResourceRef, ResourceDescriptor] | None = None) -> None:
        self.result: Mapping[ResourceRef, ResourceDescriptor] = (
            default_descriptors() if result is None else result
        )
        self.error: Exception | None = None
        self.calls = 0
        self.gate: asyncio.Event | None = None

    async def discover(self) -> dict[ResourceRef, ResourceDescriptor]:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return dict(self.result)


# ---------------------------------------------------------------------------
# Raw responses
# ---------------------------------------------------------------------------


class FakeRawResponse:
    """Stands in for the aiohttp response returned with ``_preload_content=False``."""

    def __init__(self, payload: Any, status: int = 200) -> None:
        self.payload = payload
        self.status = status
        self.released = False

    async def json(self) -> Any:
        return self.payload

    async def text(self) -> str:
        return json.dumps(self.payload)

    def release(self) -> None:
        self.released = True


# ---------------------------------------------------------------------------
# Object fixtures
# ---------------------------------------------------------------------------


def pod_object(name: str = "web-0", namespace: str = "default") -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "labels": {"app": "web"},
            "managedFields": [{"manager": "kubectl", "operation": "Apply"}],
        },
        "spec": {"containers": [{"name": "app", "image": "nginx:1.27"}]},
        "status": {"phase": "Running"},
    }


def widget_object(name: str = "blue", namespace: str = "team-a") -> dict[str, Any]:
    return {
        "apiVersion": "example.io/v1",
        "kind": "Widget",
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"size": 3, "color": name},
    }


@pytest.fixture
async def api_client() -> Any:
    client = ApiClient()
    yield client
    await client.close()


@pytest.fixture
def converter(api_client: Any) -> ObjectConverter:
    return ObjectConverter(api_client)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
