"""Resource identity and descriptor data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

_CORE_GROUP_ALIASES = ("", "core")


class OutputShape(StrEnum):
    """Representation a caller wants back from the accessor."""

    TYPED = "typed"
    GENERIC = "generic"


class RegistryState(StrEnum):
    """Lifecycle state of the resource registry."""

    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


@dataclass(frozen=True, order=True)
class ResourceRef:
    """Identity triple (group, version, plural resource name).

    Two refs are equal only when all three fields match exactly; no
    preferred-version resolution is performed.
    """

    group: str
    version: str
    resource: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def is_core(self) -> bool:
        return not self.group

    @classmethod
    def parse(cls, text: str) -> ResourceRef:
        """Parse ``v1/pods``, ``apps/v1/deployments`` or ``core/v1/pods``."""
        parts = text.strip().split("/")
        if len(parts) == 2:
            group, (version, resource) = "", parts
        elif len(parts) == 3:
            group, version, resource = parts
        else:
            raise ValueError(f"Invalid resource reference: {text!r}. Expected [group/]version/resource")
        if not version or not resource:
            raise ValueError(f"Invalid resource reference: {text!r}. Version and resource must be non-empty")
        if group in _CORE_GROUP_ALIASES:
            group = ""
        return cls(group=group, version=version, resource=resource)

    def __str__(self) -> str:
        return f"{self.api_version}/{self.resource}"


@dataclass(frozen=True)
class KindRef:
    """Group, version and Kind name used to decode objects."""

    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def __str__(self) -> str:
        return f"{self.api_version}, Kind={self.kind}"


@dataclass(frozen=True)
class ResourceDescriptor:
    """One kind of cluster object, as produced by a discovery pass.

    Immutable. Equality and hashing use the identity triple only, so a
    descriptor set never holds two entries for the same ref.
    """

    ref: ResourceRef
    kind: KindRef = field(compare=False)
    namespaced: bool = field(default=True, compare=False)
    is_custom: bool = field(default=False, compare=False)

    @property
    def scope(self) -> str:
        return "Namespaced" if self.namespaced else "Cluster"


def builtin(group: str, version: str, resource: str, kind: str, *, namespaced: bool = True) -> ResourceDescriptor:
    """Build the descriptor of a built-in kind."""
    return ResourceDescriptor(
        ref=ResourceRef(group, version, resource),
        kind=KindRef(group, version, kind),
        namespaced=namespaced,
        is_custom=False,
    )
