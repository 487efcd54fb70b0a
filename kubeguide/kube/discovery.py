"""Resource discovery: built-in kinds plus installed CustomResourceDefinitions.

A pass is all-or-nothing. The built-in table is a closed, hand-maintained
set; custom kinds come from listing every CRD and emitting one descriptor per
served version. A failure to list CRDs aborts the pass instead of silently
degrading to built-ins only.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from kubeguide.kube.errors import DiscoveryError
from kubeguide.models.resources import KindRef, ResourceDescriptor, ResourceRef, builtin
from kubeguide.observability.logging import get_logger

_log = get_logger("kube.discovery")

_NAMESPACED_SCOPE = "Namespaced"

BUILTIN_RESOURCES: tuple[ResourceDescriptor, ...] = (
    builtin("", "v1", "pods", "Pod"),
    builtin("", "v1", "services", "Service"),
    builtin("", "v1", "configmaps", "ConfigMap"),
    builtin("", "v1", "secrets", "Secret"),
    builtin("", "v1", "namespaces", "Namespace", namespaced=False),
    builtin("apps", "v1", "deployments", "Deployment"),
    builtin("apps", "v1", "replicasets", "ReplicaSet"),
    builtin("apps", "v1", "daemonsets", "DaemonSet"),
    builtin("apps", "v1", "statefulsets", "StatefulSet"),
)


def descriptors_from_crd(crd: Any) -> Iterator[ResourceDescriptor]:
    """Yield one descriptor per served version of a CustomResourceDefinition."""
    spec = crd.spec
    namespaced = spec.scope == _NAMESPACED_SCOPE
    for version in spec.versions or []:
        if not version.served:
            continue
        yield ResourceDescriptor(
            ref=ResourceRef(spec.group, version.name, spec.names.plural),
            kind=KindRef(spec.group, version.name, spec.names.kind),
            namespaced=namespaced,
            is_custom=True,
        )


class DiscoveryEngine:
    """Enumerates the resource kinds currently available in the cluster."""

    def __init__(
        self,
        connection: Any,
        builtins: Iterable[ResourceDescriptor] = BUILTIN_RESOURCES,
        request_timeout: float | None = None,
    ) -> None:
        self._connection = connection
        self._builtins = tuple(builtins)
        self._request_timeout = request_timeout

    async def discover(self) -> dict[ResourceRef, ResourceDescriptor]:
        """Run one full pass and return the complete descriptor map.

        Raises:
            DiscoveryError: listing CustomResourceDefinitions failed.
        """
        descriptors = {d.ref: d for d in self._builtins}

        try:
            crd_list = await self._connection.apiextensions.list_custom_resource_definition(
                _request_timeout=self._request_timeout,
            )
        except Exception as exc:
            raise DiscoveryError(f"failed to discover custom resources: {exc}") from exc

        custom_count = 0
        for crd in crd_list.items or []:
            for descriptor in descriptors_from_crd(crd):
                previous = descriptors.get(descriptor.ref)
                if previous is not None and not previous.is_custom:
                    # A custom kind replaces a built-in with the same triple.
                    _log.warning(
                        "custom_resource_shadows_builtin",
                        resource=str(descriptor.ref),
                        crd=crd.metadata.name if crd.metadata else "",
                    )
                descriptors[descriptor.ref] = descriptor
                custom_count += 1

        _log.debug(
            "discovery_completed",
            builtin=len(self._builtins),
            custom=custom_count,
            total=len(descriptors),
        )
        return descriptors
