"""LIFX LAN message header encoding and decoding.

Every datagram starts with a 36-byte little-endian header made of the
frame header, the frame address and the protocol header::

    offset  size  field
    0       2     size (header + payload)
    2       2     protocol (bits 0-11), addressable (12), tagged (13), origin (14-15)
    4       4     source
    8       8     target (6 bytes device address + 2 reserved)
    16      6     reserved
    22      1     res_required (bit 0), ack_required (bit 1), reserved (2-7)
    23      1     sequence
    24      8     reserved
    32      2     type
    34      2     reserved
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any

from lifx_lan.errors import DecodeError, EncodeError

HEADER_SIZE = 36
MAX_MESSAGE_SIZE = 0xFFFF
PROTOCOL_NUMBER = 1024
TARGET_LENGTH = 6
NO_TARGET = bytes(TARGET_LENGTH)

_HEADER_STRUCT = struct.Struct("<HHI6s8xBB8xH2x")

_PROTOCOL_MASK = 0x0FFF
_ADDRESSABLE_BIT = 1 << 12
_TAGGED_BIT = 1 << 13
_ORIGIN_SHIFT = 14
_RES_REQUIRED_BIT = 0x01
_ACK_REQUIRED_BIT = 0x02


def target_to_serial_number(target: bytes | memoryview) -> str:
    """Render a 6-byte target as a 12-digit lowercase hex serial number."""
    return bytes(target[:TARGET_LENGTH]).hex()


def serial_number_to_target(serial_number: str) -> bytes:
    """Convert a 12-digit hex serial number to its 6-byte target.

    :raises ValueError: If *serial_number* is not 12 hex digits.
    """
    if len(serial_number) != 2 * TARGET_LENGTH:
        msg = f"Invalid serial number: {serial_number!r}"
        raise ValueError(msg)
    try:
        return bytes.fromhex(serial_number)
    except ValueError:
        msg = f"Invalid serial number: {serial_number!r}"
        raise ValueError(msg) from None


@dataclass(frozen=True, slots=True)
class Header:
    """Decoded LIFX message header."""

    size: int
    protocol: int
    addressable: bool
    tagged: bool
    origin: int
    source: int
    target: bytes
    res_required: bool
    ack_required: bool
    sequence: int
    type: int

    @property
    def serial_number(self) -> str:
        """The target rendered as a serial number string."""
        return target_to_serial_number(self.target)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-friendly dict."""
        return {
            "size": self.size,
            "protocol": self.protocol,
            "addressable": self.addressable,
            "tagged": self.tagged,
            "origin": self.origin,
            "source": self.source,
            "target": self.target.hex(),
            "res_required": self.res_required,
            "ack_required": self.ack_required,
            "sequence": self.sequence,
            "type": self.type,
        }


@dataclass(frozen=True, slots=True)
class Message:
    """A decoded datagram: header, payload and, when known, its sender."""

    header: Header
    payload: bytes
    address: str | None = None
    port: int | None = None

    @property
    def source(self) -> int:
        return self.header.source

    @property
    def sequence(self) -> int:
        return self.header.sequence

    @property
    def type(self) -> int:
        return self.header.type

    @property
    def serial_number(self) -> str:
        return self.header.serial_number

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-friendly dict."""
        result: dict[str, Any] = {
            "header": self.header.to_dict(),
            "payload": self.payload.hex(),
        }
        if self.address is not None:
            result["address"] = self.address
            result["port"] = self.port
        return result


def encode(
    tagged: bool,
    source: int,
    target: bytes,
    res_required: bool,
    ack_required: bool,
    sequence: int,
    type: int,
    payload: bytes = b"",
) -> bytes:
    """Encode a complete LIFX message.

    *sequence* and *source* wrap silently (mod 2**8 and 2**32) so that
    long-running sessions can keep incrementing them.

    :param tagged: Broadcast framing flag, set for discovery.
    :param source: Correlation identifier echoed back by the device.
    :param target: Device address, up to 6 bytes; all-zero addresses
        every device.
    :param res_required: Ask the device for a state reply.
    :param ack_required: Ask the device for an acknowledgement.
    :param sequence: Per-device sequence number.
    :param type: Message type code.
    :param payload: Already-encoded payload bytes.
    :returns: A buffer of exactly ``36 + len(payload)`` bytes.
    :raises EncodeError: If *target* is longer than 6 bytes or the
        encoded size would exceed 65535.
    """
    if len(target) > TARGET_LENGTH:
        msg = f"Target must be at most {TARGET_LENGTH} bytes, got {len(target)}"
        raise EncodeError(msg, {"target_length": len(target)})

    size = HEADER_SIZE + len(payload)
    if size > MAX_MESSAGE_SIZE:
        msg = f"Message size {size} exceeds maximum {MAX_MESSAGE_SIZE}"
        raise EncodeError(msg, {"size": size})

    flags = PROTOCOL_NUMBER | _ADDRESSABLE_BIT
    if tagged:
        flags |= _TAGGED_BIT
    response_flags = 0
    if res_required:
        response_flags |= _RES_REQUIRED_BIT
    if ack_required:
        response_flags |= _ACK_REQUIRED_BIT

    buf = bytearray(size)
    _HEADER_STRUCT.pack_into(
        buf,
        0,
        size,
        flags,
        source & 0xFFFFFFFF,
        bytes(target).ljust(TARGET_LENGTH, b"\x00"),
        response_flags,
        sequence & 0xFF,
        type & 0xFFFF,
    )
    buf[HEADER_SIZE:] = payload
    return bytes(buf)


def decode_header(data: bytes | memoryview) -> Header:
    """Decode the 36-byte header at the start of *data*.

    :raises DecodeError: If *data* is shorter than the header or the
        declared size does not match the buffer length.
    """
    if len(data) < HEADER_SIZE:
        msg = f"Message too short: need at least {HEADER_SIZE} bytes, got {len(data)}"
        raise DecodeError(msg, {"length": len(data)})

    (
        size,
        flags,
        source,
        target,
        response_flags,
        sequence,
        msg_type,
    ) = _HEADER_STRUCT.unpack_from(data, 0)

    if size != len(data):
        msg = f"Invalid message size: declared {size}, actual {len(data)}"
        raise DecodeError(msg, {"declared": size, "actual": len(data)})

    return Header(
        size=size,
        protocol=flags & _PROTOCOL_MASK,
        addressable=bool(flags & _ADDRESSABLE_BIT),
        tagged=bool(flags & _TAGGED_BIT),
        origin=(flags >> _ORIGIN_SHIFT) & 0b11,
        source=source,
        target=target,
        res_required=bool(response_flags & _RES_REQUIRED_BIT),
        ack_required=bool(response_flags & _ACK_REQUIRED_BIT),
        sequence=sequence,
        type=msg_type,
    )


def get_payload(data: bytes | memoryview) -> bytes:
    """Return the payload following the header."""
    return bytes(data[HEADER_SIZE:])


def decode_message(
    data: bytes | memoryview,
    address: str | None = None,
    port: int | None = None,
) -> Message:
    """Decode a full datagram into a :class:`Message`.

    :raises DecodeError: If the header is malformed.
    """
    header = decode_header(data)
    return Message(header=header, payload=get_payload(data), address=address, port=port)
