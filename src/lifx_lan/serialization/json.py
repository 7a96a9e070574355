"""JSON serializer backed by orjson."""

from __future__ import annotations

import logging
from datetime import timedelta
from enum import Enum, IntEnum
from typing import Any

import orjson

logger = logging.getLogger(__name__)


def json_default(obj: object) -> object:
    """Default handler for serializing LIFX types to JSON.

    Handles objects with a ``to_dict()`` method, ``bytes`` and
    ``memoryview`` (hex string), ``IntEnum`` members (``int``), other
    enum members (their value) and ``timedelta`` (seconds).

    :raises TypeError: If *obj* is not a recognised type.
    """
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, bytes):
        return obj.hex()
    if isinstance(obj, memoryview):
        return bytes(obj).hex()
    if isinstance(obj, IntEnum):
        return int(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, timedelta):
        return obj.total_seconds()
    msg = f"Cannot serialize {type(obj).__name__}"
    logger.warning("serialize failed: %s", msg)
    raise TypeError(msg)


class JsonSerializer:
    """JSON serializer using orjson.

    ``bytes`` values are encoded as hex strings; deserialization
    returns them as plain strings.

    :param pretty: Indent output with 2 spaces.
    :param sort_keys: Sort dict keys alphabetically.
    """

    def __init__(
        self,
        *,
        pretty: bool = False,
        sort_keys: bool = False,
    ) -> None:
        self._options = orjson.OPT_NON_STR_KEYS
        if pretty:
            self._options |= orjson.OPT_INDENT_2
        if sort_keys:
            self._options |= orjson.OPT_SORT_KEYS

    def encode(self, data: dict[str, Any]) -> bytes:
        """Encode a dict to JSON bytes."""
        return orjson.dumps(data, default=json_default, option=self._options)

    def decode(self, raw: bytes) -> dict[str, Any]:
        """Decode JSON bytes to a dict."""
        result = orjson.loads(raw)
        if not isinstance(result, dict):
            msg = f"Expected JSON object, got {type(result).__name__}"
            logger.warning("deserialize failed: %s", msg)
            raise TypeError(msg)
        return result
