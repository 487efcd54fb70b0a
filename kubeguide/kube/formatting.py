"""Display helpers for objects and descriptors."""

from __future__ import annotations

import copy
from typing import Any

from kubeguide.models.resources import ResourceDescriptor


def clean_object(obj: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of an open map without ``metadata.managedFields``."""
    cleaned = copy.deepcopy(obj)
    metadata = cleaned.get("metadata")
    if isinstance(metadata, dict):
        metadata.pop("managedFields", None)
    for item in cleaned.get("items") or []:
        if isinstance(item, dict) and isinstance(item.get("metadata"), dict):
            item["metadata"].pop("managedFields", None)
    return cleaned


def descriptor_row(descriptor: ResourceDescriptor) -> tuple[str, str, str, str, str]:
    """(resource, apiVersion, kind, scope, origin) for a listing table."""
    return (
        descriptor.ref.resource,
        descriptor.ref.api_version,
        descriptor.kind.kind,
        descriptor.scope,
        "custom" if descriptor.is_custom else "core",
    )


def format_table(rows: list[tuple[str, ...]], headers: tuple[str, ...]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row, strict=True)]
    lines = ["  ".join(cell.ljust(w) for cell, w in zip(headers, widths, strict=True)).rstrip()]
    for row in rows:
        lines.append("  ".join(cell.ljust(w) for cell, w in zip(row, widths, strict=True)).rstrip())
    return "\n".join(lines)
