"""Wire encoding for LIFX LAN messages."""

from lifx_lan.encoding.header import (
    HEADER_SIZE,
    NO_TARGET,
    Header,
    Message,
    decode_header,
    decode_message,
    encode,
    get_payload,
)
from lifx_lan.encoding.payloads import Cursor, decode_state_label

__all__ = [
    "HEADER_SIZE",
    "NO_TARGET",
    "Cursor",
    "Header",
    "Message",
    "decode_header",
    "decode_message",
    "decode_state_label",
    "encode",
    "get_payload",
]
