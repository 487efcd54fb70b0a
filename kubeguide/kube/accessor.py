"""Unified get/list surface over built-in and custom resources.

Every call resolves the identity triple through the registry, checks the
namespace against the kind's scope, then picks a strategy:

- ``OutputShape.GENERIC``: generic fetch, any kind;
- ``OutputShape.TYPED`` on a built-in kind: typed fetch when a handler is
  registered, otherwise ``UnsupportedKindError`` (or, with
  ``generic_fallback``, a generic fetch decoded into the kind's model);
- ``OutputShape.TYPED`` on a custom kind: ``ConversionError``, custom kinds
  have no generated model;
- a model class name (``"V1Pod"``): generic fetch decoded into that model.
"""

from __future__ import annotations

from typing import Any

from kubeguide.kube.conversion import ObjectConverter, model_name_for
from kubeguide.kube.errors import AccessorError, ConversionError, ScopeError, UnsupportedKindError
from kubeguide.kube.registry import ResourceRegistry
from kubeguide.kube.strategies import GenericFetcher, TypedFetcher
from kubeguide.models.resources import OutputShape, ResourceDescriptor, ResourceRef
from kubeguide.observability.logging import get_logger
from kubeguide.observability.metrics import accessor_requests_total

_log = get_logger("kube.accessor")

Shape = OutputShape | str


def _normalize_shape(shape: Shape) -> Shape:
    if isinstance(shape, OutputShape):
        return shape
    try:
        return OutputShape(shape)
    except ValueError:
        return shape


class UnifiedAccessor:
    """Public read surface of the resource core.

    Stateless per call; all shared state lives in the registry.
    """

    def __init__(
        self,
        registry: ResourceRegistry,
        typed: TypedFetcher,
        generic: GenericFetcher,
        converter: ObjectConverter,
        generic_fallback: bool = False,
    ) -> None:
        self._registry = registry
        self._typed = typed
        self._generic = generic
        self._converter = converter
        self._generic_fallback = generic_fallback

    @property
    def registry(self) -> ResourceRegistry:
        return self._registry

    async def _resolve(self, ref: ResourceRef, namespace: str, *, single: bool) -> ResourceDescriptor:
        descriptor = await self._registry.get(ref)
        if namespace and not descriptor.namespaced:
            raise ScopeError(f"resource {ref} is cluster-scoped, cannot specify namespace")
        if single and not namespace and descriptor.namespaced:
            raise ScopeError(f"resource {ref} is namespaced, a namespace is required to get one object")
        return descriptor

    def _typed_model(self, descriptor: ResourceDescriptor, *, as_list: bool) -> str:
        """Model name used when a typed result must come from a generic fetch."""
        if descriptor.is_custom:
            raise ConversionError(
                f"no typed model for custom resource {descriptor.ref} ({descriptor.kind.kind}); "
                "request the generic shape or name a model"
            )
        if not self._generic_fallback:
            raise UnsupportedKindError(descriptor.ref)
        return model_name_for(descriptor.kind, as_list=as_list)

    async def get(
        self,
        ref: ResourceRef,
        name: str,
        namespace: str = "",
        shape: Shape = OutputShape.GENERIC,
    ) -> Any:
        """Fetch one object.

        Raises:
            NotFoundError:        *ref* is unknown to the cluster.
            ScopeError:           namespace given for a cluster-scoped kind, or
                                  missing for a namespaced one.
            UnsupportedKindError: typed shape for a built-in with no handler.
            ConversionError:      the object does not fit the requested model.
            FetchError:           the API call failed.
            DiscoveryError:       the registry could not be built.
        """
        shape = _normalize_shape(shape)
        descriptor = await self._resolve(ref, namespace, single=True)
        strategy = "generic"
        try:
            if shape is OutputShape.GENERIC:
                result = await self._generic.get(descriptor, namespace, name)
            elif shape is OutputShape.TYPED and not descriptor.is_custom and self._typed.supports(ref):
                strategy = "typed"
                result = await self._typed.get(descriptor, namespace, name)
            else:
                model = self._typed_model(descriptor, as_list=False) if shape is OutputShape.TYPED else str(shape)
                result = self._converter.decode(await self._generic.get(descriptor, namespace, name), model)
        except AccessorError as exc:
            accessor_requests_total.labels(operation="get", strategy=strategy, outcome="error").inc()
            _log.debug("get_failed", resource=str(ref), namespace=namespace, name=name, error=str(exc))
            raise
        accessor_requests_total.labels(operation="get", strategy=strategy, outcome="ok").inc()
        return result

    async def list(
        self,
        ref: ResourceRef,
        namespace: str = "",
        shape: Shape = OutputShape.GENERIC,
    ) -> Any:
        """List objects; an empty namespace lists across every namespace.

        Same validation order and strategy split as ``get``.
        """
        shape = _normalize_shape(shape)
        descriptor = await self._resolve(ref, namespace, single=False)
        strategy = "generic"
        try:
            if shape is OutputShape.GENERIC:
                result = await self._generic.list(descriptor, namespace)
            elif shape is OutputShape.TYPED and not descriptor.is_custom and self._typed.supports(ref):
                strategy = "typed"
                result = await self._typed.list(descriptor, namespace)
            else:
                model = self._typed_model(descriptor, as_list=True) if shape is OutputShape.TYPED else str(shape)
                result = self._converter.decode(await self._generic.list(descriptor, namespace), model)
        except AccessorError as exc:
            accessor_requests_total.labels(operation="list", strategy=strategy, outcome="error").inc()
            _log.debug("list_failed", resource=str(ref), namespace=namespace, error=str(exc))
            raise
        accessor_requests_total.labels(operation="list", strategy=strategy, outcome="ok").inc()
        return result

    def to_open_map(self, obj: Any) -> dict[str, Any]:
        """Open-map form of any accessor result, typed or generic."""
        return self._converter.encode(obj)

    async def list_available(self, custom_only: bool = False) -> tuple[ResourceDescriptor, ...]:
        """Registry listing sorted for display."""
        descriptors = await (self._registry.list_custom() if custom_only else self._registry.list_all())
        return tuple(sorted(descriptors, key=lambda d: (d.is_custom, d.ref.group, d.ref.resource, d.ref.version)))
