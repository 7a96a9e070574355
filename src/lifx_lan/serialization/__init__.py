"""JSON serialization for decoded LIFX data.

Any object with a ``to_dict()`` method (headers, messages, devices,
groups, decoded state records) can be passed to :func:`serialize`.
"""

from __future__ import annotations

from typing import Any

from lifx_lan.serialization.json import JsonSerializer

__all__ = ["JsonSerializer", "deserialize", "serialize"]


def serialize(obj: Any, *, pretty: bool = False, sort_keys: bool = False) -> bytes:
    """Serialize an object with ``to_dict()`` or a plain dict to JSON bytes."""
    data = obj.to_dict() if hasattr(obj, "to_dict") else obj
    return JsonSerializer(pretty=pretty, sort_keys=sort_keys).encode(data)


def deserialize(raw: bytes) -> dict[str, Any]:
    """Deserialize JSON bytes to a dict."""
    return JsonSerializer().decode(raw)
