"""Shared fixtures for kubeguide integration tests.

``FakeCluster`` is an in-memory API server: it holds CRDs and objects and
answers the same client calls the real kubernetes_asyncio API groups do
(CoreV1Api raw and typed reads, CustomObjectsApi, ApiextensionsV1Api), so
the real discovery engine, registry, fetchers and converter run end to end
without a cluster.
"""

from __future__ import annotations

import copy
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kubeguide.app import build_accessor
from kubeguide.kube.accessor import UnifiedAccessor
from kubeguide.kube.conversion import ObjectConverter
from kubeguide.models.config import KubeGuideConfig
from tests.conftest import make_crd, pod_object, widget_object

_Key = tuple[str, str, str]

# ---------------------------------------------------------------------------
# Fake API server
# ---------------------------------------------------------------------------


class FakeCluster:
    """Object store keyed by (group, version, plural) then (namespace, name)."""

    def __init__(self) -> None:
        self.crds: list[Any] = []
        self.objects: dict[_Key, dict[tuple[str, str], dict[str, Any]]] = {}
        self.discovery_error: Exception | None = None
        self.discovery_calls = 0

    def add(self, group: str, version: str, plural: str, obj: dict[str, Any]) -> None:
        meta = obj["metadata"]
        store = self.objects.setdefault((group, version, plural), {})
        store[(meta.get("namespace", ""), meta["name"])] = obj

    def read(self, key: _Key, namespace: str, name: str) -> dict[str, Any]:
        try:
            return copy.deepcopy(self.objects[key][(namespace, name)])
        except KeyError:
            raise ApiException(status=404, reason="Not Found") from None

    def list(self, key: _Key, namespace: str = "") -> list[dict[str, Any]]:
        store = self.objects.get(key, {})
        return [copy.deepcopy(obj) for (ns, _), obj in sorted(store.items()) if not namespace or ns == namespace]


class _RawResponse:
    def __init__(self, payload: Any, status: int = 200) -> None:
        self.payload = payload
        self.status = status

    async def json(self) -> Any:
        return self.payload

    async def text(self) -> str:
        return str(self.payload)

    def release(self) -> None:
        pass


class _FakeCoreV1:
    """Core-group reads for pods, config maps and namespaces.

    With ``_preload_content=False`` a raw response is returned, as the real
    client does; otherwise the body is decoded into the generated model.
    """

    def __init__(self, cluster: FakeCluster, converter: ObjectConverter) -> None:
        self._cluster = cluster
        self._converter = converter

    def _reply(self, model: str, produce: Any, preload: bool) -> Any:
        if preload:
            return self._converter.decode(produce(), model)
        try:
            return _RawResponse(produce())
        except ApiException as exc:
            return _RawResponse({"kind": "Status", "reason": exc.reason}, status=exc.status)

    def _listing(self, plural: str, kind: str, namespace: str = "") -> Any:
        return lambda: {
            "apiVersion": "v1",
            "kind": f"{kind}List",
            "metadata": {},
            "items": self._cluster.list(("", "v1", plural), namespace),
        }

    async def read_namespaced_pod(self, name: str, namespace: str, _preload_content: bool = True, **_: Any) -> Any:
        return self._reply("V1Pod", lambda: self._cluster.read(("", "v1", "pods"), namespace, name), _preload_content)

    async def list_namespaced_pod(self, namespace: str, _preload_content: bool = True, **_: Any) -> Any:
        return self._reply("V1PodList", self._listing("pods", "Pod", namespace), _preload_content)

    async def list_pod_for_all_namespaces(self, _preload_content: bool = True, **_: Any) -> Any:
        return self._reply("V1PodList", self._listing("pods", "Pod"), _preload_content)

    async def read_namespaced_config_map(
        self, name: str, namespace: str, _preload_content: bool = True, **_: Any
    ) -> Any:
        return self._reply(
            "V1ConfigMap", lambda: self._cluster.read(("", "v1", "configmaps"), namespace, name), _preload_content
        )

    async def list_config_map_for_all_namespaces(self, _preload_content: bool = True, **_: Any) -> Any:
        return self._reply("V1ConfigMapList", self._listing("configmaps", "ConfigMap"), _preload_content)

    async def read_namespace(self, name: str, _preload_content: bool = True, **_: Any) -> Any:
        return self._reply(
            "V1Namespace", lambda: self._cluster.read(("", "v1", "namespaces"), "", name), _preload_content
        )

    async def list_namespace(self, _preload_content: bool = True, **_: Any) -> Any:
        return self._reply("V1NamespaceList", self._listing("namespaces", "Namespace"), _preload_content)


class _FakeCustomObjects:
    def __init__(self, cluster: FakeCluster) -> None:
        self._cluster = cluster

    async def get_namespaced_custom_object(
        self, group: str, version: str, namespace: str, plural: str, name: str, **_: Any
    ) -> dict[str, Any]:
        return self._cluster.read((group, version, plural), namespace, name)

    async def get_cluster_custom_object(
        self, group: str, version: str, plural: str, name: str, **_: Any
    ) -> dict[str, Any]:
        return self._cluster.read((group, version, plural), "", name)

    async def list_namespaced_custom_object(
        self, group: str, version: str, namespace: str, plural: str, **_: Any
    ) -> dict[str, Any]:
        return {"metadata": {}, "items": self._cluster.list((group, version, plural), namespace)}

    async def list_cluster_custom_object(self, group: str, version: str, plural: str, **_: Any) -> dict[str, Any]:
        return {"metadata": {}, "items": self._cluster.list((group, version, plural))}


class _FakeApiextensions:
    def __init__(self, cluster: FakeCluster) -> None:
        self._cluster = cluster

    async def list_custom_resource_definition(self, **_: Any) -> Any:
        self._cluster.discovery_calls += 1
        if self._cluster.discovery_error is not None:
            raise self._cluster.discovery_error
        return SimpleNamespace(items=list(self._cluster.crds))


def fake_connection(cluster: FakeCluster, api_client: Any) -> SimpleNamespace:
    """Connection-shaped object whose API groups are served by *cluster*."""
    return SimpleNamespace(
        api_client=api_client,
        core_v1=_FakeCoreV1(cluster, ObjectConverter(api_client)),
        apps_v1=MagicMock(),
        custom_objects=_FakeCustomObjects(cluster),
        apiextensions=_FakeApiextensions(cluster),
        close=AsyncMock(),
    )


# ---------------------------------------------------------------------------
# Seeded cluster
# ---------------------------------------------------------------------------


def seeded_cluster() -> FakeCluster:
    """Widgets served at v1 and v1beta1 (v1alpha1 retired), a few pods."""
    cluster = FakeCluster()
    cluster.crds.append(
        make_crd(
            "widgets",
            "example.io",
            "Widget",
            versions=[("v1", True), ("v1beta1", True), ("v1alpha1", False)],
        )
    )
    cluster.crds.append(make_crd("gadgets", "example.io", "Gadget", scope="Cluster"))

    cluster.add("example.io", "v1", "widgets", widget_object("blue", "team-a"))
    cluster.add("example.io", "v1", "widgets", widget_object("green", "team-a"))
    cluster.add("example.io", "v1", "widgets", widget_object("red", "team-b"))
    beta = widget_object("legacy", "team-a")
    beta["apiVersion"] = "example.io/v1beta1"
    cluster.add("example.io", "v1beta1", "widgets", beta)
    cluster.add(
        "example.io",
        "v1",
        "gadgets",
        {"apiVersion": "example.io/v1", "kind": "Gadget", "metadata": {"name": "g1"}, "spec": {}},
    )

    cluster.add("", "v1", "pods", pod_object("web-0", "default"))
    cluster.add("", "v1", "pods", pod_object("web-1", "default"))
    cluster.add("", "v1", "pods", pod_object("worker-0", "jobs"))
    cluster.add(
        "",
        "v1",
        "configmaps",
        {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {"name": "settings", "namespace": "default"},
            "data": {"LOG_LEVEL": "debug"},
        },
    )
    cluster.add("", "v1", "namespaces", {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": "default"}})
    return cluster


@pytest.fixture
def cluster() -> FakeCluster:
    return seeded_cluster()


@pytest.fixture
def connection(cluster: FakeCluster, api_client: Any) -> SimpleNamespace:
    return fake_connection(cluster, api_client)


@pytest.fixture
def accessor(connection: SimpleNamespace) -> UnifiedAccessor:
    return build_accessor(connection, KubeGuideConfig())
