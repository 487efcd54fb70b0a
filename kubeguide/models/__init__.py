"""Core data structures for kubeguide."""

from kubeguide.models.config import KubeGuideConfig
from kubeguide.models.resources import (
    KindRef,
    OutputShape,
    RegistryState,
    ResourceDescriptor,
    ResourceRef,
)

__all__ = [
    "KindRef",
    "KubeGuideConfig",
    "OutputShape",
    "RegistryState",
    "ResourceDescriptor",
    "ResourceRef",
]
