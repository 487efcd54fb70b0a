"""Kubernetes resource core for kubeguide.

Exposes the unified accessor and the pieces it is assembled from.

Submodules:
    discovery   -- built-in kinds plus served CRD versions.
    registry    -- TTL-refreshed descriptor map with single-flight rebuilds.
    strategies  -- typed (generated models) and generic (open map) fetchers.
    conversion  -- open map <-> generated model converter.
    accessor    -- UnifiedAccessor: validation and strategy dispatch.
"""

from kubeguide.kube.accessor import UnifiedAccessor
from kubeguide.kube.conversion import ObjectConverter
from kubeguide.kube.discovery import BUILTIN_RESOURCES, DiscoveryEngine
from kubeguide.kube.errors import (
    AccessorError,
    ConversionError,
    DiscoveryError,
    FetchError,
    NotFoundError,
    ScopeError,
    UnsupportedKindError,
)
from kubeguide.kube.registry import ResourceRegistry
from kubeguide.kube.strategies import TYPED_HANDLERS, GenericFetcher, TypedFetcher

__all__ = [
    "BUILTIN_RESOURCES",
    "TYPED_HANDLERS",
    "AccessorError",
    "ConversionError",
    "DiscoveryEngine",
    "DiscoveryError",
    "FetchError",
    "GenericFetcher",
    "NotFoundError",
    "ObjectConverter",
    "ResourceRegistry",
    "ScopeError",
    "TypedFetcher",
    "UnifiedAccessor",
    "UnsupportedKindError",
]
