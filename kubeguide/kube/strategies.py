"""Typed and generic fetch strategies.

``TypedFetcher`` returns generated model objects for the small set of kinds
listed in ``TYPED_HANDLERS``. ``GenericFetcher`` returns open maps for any
kind: non-core groups go through ``CustomObjectsApi``, core-group kinds
through the CoreV1Api method named after the kind with the raw JSON body.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from aiohttp import ClientError
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kubeguide.kube.errors import FetchError, UnsupportedKindError
from kubeguide.models.resources import ResourceDescriptor, ResourceRef
from kubeguide.observability.logging import get_logger

_log = get_logger("kube.strategies")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class TypedHandler:
    """Where a typed kind lives on the connection and how to call it."""

    api: str
    model: str
    read: str
    list_namespaced: str
    list_all: str


TYPED_HANDLERS: dict[ResourceRef, TypedHandler] = {
    ResourceRef("", "v1", "pods"): TypedHandler(
        api="core_v1",
        model="V1Pod",
        read="read_namespaced_pod",
        list_namespaced="list_namespaced_pod",
        list_all="list_pod_for_all_namespaces",
    ),
    ResourceRef("", "v1", "services"): TypedHandler(
        api="core_v1",
        model="V1Service",
        read="read_namespaced_service",
        list_namespaced="list_namespaced_service",
        list_all="list_service_for_all_namespaces",
    ),
    ResourceRef("apps", "v1", "deployments"): TypedHandler(
        api="apps_v1",
        model="V1Deployment",
        read="read_namespaced_deployment",
        list_namespaced="list_namespaced_deployment",
        list_all="list_deployment_for_all_namespaces",
    ),
}


def snake_kind(kind: str) -> str:
    """``ConfigMap`` -> ``config_map``, matching generated method names."""
    return _CAMEL_BOUNDARY.sub("_", kind).lower()


def _fetch_error(exc: Exception, action: str, descriptor: ResourceDescriptor) -> FetchError:
    _log.debug("fetch_failed", action=action, resource=str(descriptor.ref), error=str(exc))
    if isinstance(exc, ApiException):
        return FetchError(f"{action} {descriptor.ref} failed: {exc.status} {exc.reason}", status=exc.status)
    return FetchError(f"{action} {descriptor.ref} failed: {exc}")


class TypedFetcher:
    """Fetches strongly-shaped objects for the kinds in a handler table."""

    def __init__(
        self,
        connection: Any,
        handlers: dict[ResourceRef, TypedHandler] | None = None,
        request_timeout: float | None = None,
    ) -> None:
        self._connection = connection
        self._handlers = TYPED_HANDLERS if handlers is None else handlers
        self._request_timeout = request_timeout

    def supports(self, ref: ResourceRef) -> bool:
        return ref in self._handlers

    def _handler(self, descriptor: ResourceDescriptor) -> tuple[TypedHandler, Any]:
        handler = self._handlers.get(descriptor.ref)
        if handler is None:
            raise UnsupportedKindError(descriptor.ref)
        return handler, getattr(self._connection, handler.api)

    async def get(self, descriptor: ResourceDescriptor, namespace: str, name: str) -> Any:
        handler, api = self._handler(descriptor)
        try:
            return await getattr(api, handler.read)(name, namespace, _request_timeout=self._request_timeout)
        except (ApiException, ClientError, TimeoutError) as exc:
            raise _fetch_error(exc, "get", descriptor) from exc

    async def list(self, descriptor: ResourceDescriptor, namespace: str) -> Any:
        handler, api = self._handler(descriptor)
        try:
            if namespace:
                return await getattr(api, handler.list_namespaced)(namespace, _request_timeout=self._request_timeout)
            return await getattr(api, handler.list_all)(_request_timeout=self._request_timeout)
        except (ApiException, ClientError, TimeoutError) as exc:
            raise _fetch_error(exc, "list", descriptor) from exc


class GenericFetcher:
    """Fetches schema-less open maps for any kind."""

    def __init__(self, connection: Any, request_timeout: float | None = None) -> None:
        self._connection = connection
        self._request_timeout = request_timeout

    async def get(self, descriptor: ResourceDescriptor, namespace: str, name: str) -> dict[str, Any]:
        try:
            if descriptor.ref.is_core:
                obj = await self._core_get(descriptor, namespace, name)
            else:
                obj = await self._custom_get(descriptor, namespace, name)
        except (ApiException, ClientError, TimeoutError) as exc:
            raise _fetch_error(exc, "get", descriptor) from exc
        return _with_type_meta(obj, descriptor, descriptor.kind.kind)

    async def list(self, descriptor: ResourceDescriptor, namespace: str) -> dict[str, Any]:
        try:
            if descriptor.ref.is_core:
                obj = await self._core_list(descriptor, namespace)
            else:
                obj = await self._custom_list(descriptor, namespace)
        except (ApiException, ClientError, TimeoutError) as exc:
            raise _fetch_error(exc, "list", descriptor) from exc
        result = _with_type_meta(obj, descriptor, f"{descriptor.kind.kind}List")
        # The API server omits apiVersion/kind on list items.
        result["items"] = [_with_type_meta(item, descriptor, descriptor.kind.kind) for item in result.get("items") or []]
        return result

    # --- non-core groups --------------------------------------------------

    async def _custom_get(self, descriptor: ResourceDescriptor, namespace: str, name: str) -> Any:
        ref = descriptor.ref
        api = self._connection.custom_objects
        if namespace:
            return await api.get_namespaced_custom_object(
                ref.group, ref.version, namespace, ref.resource, name, _request_timeout=self._request_timeout
            )
        return await api.get_cluster_custom_object(
            ref.group, ref.version, ref.resource, name, _request_timeout=self._request_timeout
        )

    async def _custom_list(self, descriptor: ResourceDescriptor, namespace: str) -> Any:
        ref = descriptor.ref
        api = self._connection.custom_objects
        if namespace:
            return await api.list_namespaced_custom_object(
                ref.group, ref.version, namespace, ref.resource, _request_timeout=self._request_timeout
            )
        # Cluster-wide path also lists a namespaced kind across every namespace.
        return await api.list_cluster_custom_object(
            ref.group, ref.version, ref.resource, _request_timeout=self._request_timeout
        )

    # --- core group -------------------------------------------------------

    def _core_method(self, descriptor: ResourceDescriptor, name: str) -> Any:
        method = getattr(self._connection.core_v1, name, None)
        if method is None:
            raise UnsupportedKindError(descriptor.ref)
        return method

    async def _core_get(self, descriptor: ResourceDescriptor, namespace: str, name: str) -> Any:
        kind = snake_kind(descriptor.kind.kind)
        if namespace:
            method = self._core_method(descriptor, f"read_namespaced_{kind}")
            response = await method(name, namespace, _preload_content=False, _request_timeout=self._request_timeout)
        else:
            method = self._core_method(descriptor, f"read_{kind}")
            response = await method(name, _preload_content=False, _request_timeout=self._request_timeout)
        return await _read_json(response, descriptor)

    async def _core_list(self, descriptor: ResourceDescriptor, namespace: str) -> Any:
        kind = snake_kind(descriptor.kind.kind)
        if namespace:
            method = self._core_method(descriptor, f"list_namespaced_{kind}")
            response = await method(namespace, _preload_content=False, _request_timeout=self._request_timeout)
        elif descriptor.namespaced:
            method = self._core_method(descriptor, f"list_{kind}_for_all_namespaces")
            response = await method(_preload_content=False, _request_timeout=self._request_timeout)
        else:
            method = self._core_method(descriptor, f"list_{kind}")
            response = await method(_preload_content=False, _request_timeout=self._request_timeout)
        return await _read_json(response, descriptor)


async def _read_json(response: Any, descriptor: ResourceDescriptor) -> Any:
    """Decode a raw (``_preload_content=False``) aiohttp response body.

    Raw responses skip the client's status check, so non-2xx is mapped to
    ``FetchError`` here.
    """
    try:
        if not 200 <= response.status <= 299:
            body = await response.text()
            raise FetchError(
                f"request for {descriptor.ref} failed: {response.status} {body[:200]}",
                status=response.status,
            )
        return await response.json()
    finally:
        response.release()


def _with_type_meta(obj: Any, descriptor: ResourceDescriptor, kind: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise FetchError(f"unexpected response for {descriptor.ref}: {type(obj).__name__}")
    obj.setdefault("apiVersion", descriptor.kind.api_version)
    obj.setdefault("kind", kind)
    return obj
