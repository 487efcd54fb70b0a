"""Conversion between open maps and generated kubernetes_asyncio models.

Decoding reuses the ApiClient's own deserializer so the result is identical
to what a typed API call returns; encoding uses its serializer, producing
the camelCase JSON form the API server speaks.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kubeguide.kube.errors import ConversionError
from kubeguide.models.resources import KindRef


@dataclass
class _Payload:
    # ApiClient.deserialize() only reads ``.data`` from the response object.
    data: str


def model_name_for(kind: KindRef, *, as_list: bool = False) -> str:
    """Name of the generated model class for a built-in kind.

    ``KindRef("apps", "v1", "Deployment")`` -> ``"V1Deployment"``;
    ``KindRef("", "v1beta1", "Event")`` -> ``"V1beta1Event"``.
    """
    name = f"{kind.version[:1].upper()}{kind.version[1:]}{kind.kind}"
    return f"{name}List" if as_list else name


class ObjectConverter:
    """Two-way converter between open maps and generated model objects."""

    def __init__(self, api_client: Any) -> None:
        self._api_client = api_client

    def decode(self, data: Any, model: str) -> Any:
        """Deserialize an open map into the generated model named *model*.

        Raises:
            ConversionError: *data* is not a mapping, *model* is unknown, or
                the map fails the model's client-side validation.
        """
        if not isinstance(data, Mapping):
            raise ConversionError(f"cannot decode {type(data).__name__} into {model}: expected a mapping")
        try:
            payload = _Payload(json.dumps(data))
            return self._api_client.deserialize(payload, model)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ConversionError(f"cannot decode object into {model}: {exc}") from exc

    def encode(self, obj: Any) -> dict[str, Any]:
        """Serialize a generated model (or an open map) into a plain dict."""
        if isinstance(obj, Mapping):
            return copy.deepcopy(dict(obj))
        result = self._api_client.sanitize_for_serialization(obj)
        if not isinstance(result, dict):
            raise ConversionError(f"cannot encode {type(obj).__name__} as an open map")
        return result
