"""Exception hierarchy raised by the resource accessor.

Every error derives from ``AccessorError`` so callers (CLI, UI) can catch
the whole family in one place. None of them is fatal to the process.
"""

from __future__ import annotations

from kubeguide.models.resources import ResourceRef


class AccessorError(Exception):
    """Base class for every resource accessor failure."""


class DiscoveryError(AccessorError):
    """Enumerating the cluster's resource kinds failed."""


class NotFoundError(AccessorError):
    """The identity triple is not known to the cluster."""

    def __init__(self, ref: ResourceRef) -> None:
        super().__init__(f"resource {ref} not found in cluster")
        self.ref = ref


class ScopeError(AccessorError):
    """Namespace usage does not match the kind's scope."""


class UnsupportedKindError(AccessorError):
    """The kind is known but has no typed fetch handler."""

    def __init__(self, ref: ResourceRef) -> None:
        super().__init__(f"unsupported core resource: {ref}")
        self.ref = ref


class ConversionError(AccessorError):
    """An open map could not be converted into the requested shape."""


class FetchError(AccessorError):
    """The API server rejected or failed a get/list call."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
