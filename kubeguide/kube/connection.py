"""Connection handle shared by discovery and the fetch strategies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio import config as k8s_config  # type: ignore[import-untyped]

from kubeguide.models.config import ClusterConfig
from kubeguide.observability.logging import get_logger

_log = get_logger("kube.connection")


@dataclass
class KubeConnection:
    """One authenticated ApiClient plus the API groups built on top of it.

    The core never constructs or refreshes credentials; it only consumes
    the handle. Tests substitute any object with the same attributes.
    """

    api_client: Any
    core_v1: Any
    apps_v1: Any
    custom_objects: Any
    apiextensions: Any

    @classmethod
    def from_api_client(cls, api_client: Any) -> KubeConnection:
        return cls(
            api_client=api_client,
            core_v1=k8s_client.CoreV1Api(api_client),
            apps_v1=k8s_client.AppsV1Api(api_client),
            custom_objects=k8s_client.CustomObjectsApi(api_client),
            apiextensions=k8s_client.ApiextensionsV1Api(api_client),
        )

    async def close(self) -> None:
        await self.api_client.close()


async def open_connection(cluster: ClusterConfig) -> KubeConnection:
    """Build a connection from in-cluster config, falling back to kubeconfig.

    An explicit kubeconfig path or context skips the in-cluster attempt.
    """
    configuration = k8s_client.Configuration()
    explicit = bool(cluster.kubeconfig or cluster.context)
    try:
        if explicit:
            raise k8s_config.ConfigException("explicit kubeconfig requested")
        # load_incluster_config() is synchronous in kubernetes-asyncio
        k8s_config.load_incluster_config(client_configuration=configuration)
        _log.info("k8s client configured from in-cluster service account")
    except k8s_config.ConfigException:
        await k8s_config.load_kube_config(
            config_file=cluster.kubeconfig or None,
            context=cluster.context or None,
            client_configuration=configuration,
        )
        _log.info("k8s client configured from kubeconfig", context=cluster.context or "current")
    return KubeConnection.from_api_client(k8s_client.ApiClient(configuration=configuration))
