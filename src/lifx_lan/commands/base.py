"""Command value object passed to the client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lifx_lan.types.enums import ResponseMode

if TYPE_CHECKING:
    from collections.abc import Callable

    from lifx_lan.encoding.payloads import Cursor

    Decoder = Callable[[bytes, Cursor], Any]


@dataclass(frozen=True, slots=True)
class Command:
    """A message type paired with its encoded payload.

    :param type: Message type code placed in the header.
    :param payload: Already-encoded payload bytes.
    :param decode: Decoder applied to the reply payload by
        :meth:`~lifx_lan.app.client.LifxClient.send`.
    :param response_mode: Whether the device should reply with state,
        a bare acknowledgement, or nothing at all.
    """

    type: int
    payload: bytes = b""
    decode: Decoder | None = None
    response_mode: ResponseMode = ResponseMode.RESPONSE

    @property
    def expects_reply(self) -> bool:
        """True unless the command is fire-and-forget."""
        return self.response_mode is not ResponseMode.NONE
