"""Payload field codecs for device-level LIFX messages.

Payloads are decoded field by field with a shared :class:`Cursor` so
that decoders for consecutive fields can be chained over one buffer.
"""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from lifx_lan.errors import DecodeError, EncodeError
from lifx_lan.types.enums import RssiStatus

LABEL_WIDTH = 32
ECHO_PAYLOAD_WIDTH = 64
UUID_WIDTH = 16

_U8 = struct.Struct("<B")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_F32 = struct.Struct("<f")

# Reported by devices that have no signal reading.
NO_SIGNAL_RSSI = 200


@dataclass(slots=True)
class Cursor:
    """Mutable decode position within a payload buffer."""

    current: int = 0


# --- Primitive fields ---


def decode_bytes(data: bytes | memoryview, cursor: Cursor, width: int) -> bytes:
    """Take *width* raw bytes at the cursor and advance past them.

    :raises DecodeError: If fewer than *width* bytes remain.
    """
    start = cursor.current
    end = start + width
    if end > len(data):
        msg = f"Field of {width} bytes at offset {start} exceeds payload length {len(data)}"
        raise DecodeError(msg, {"offset": start, "width": width, "length": len(data)})
    cursor.current = end
    return bytes(data[start:end])


def _decode_struct(data: bytes | memoryview, cursor: Cursor, fmt: struct.Struct) -> Any:
    return fmt.unpack(decode_bytes(data, cursor, fmt.size))[0]


def decode_string(data: bytes | memoryview, cursor: Cursor, width: int) -> str:
    """Decode a fixed-width, NUL-padded UTF-8 text field.

    Text ends at the first NUL byte or at the field width, whichever
    comes first; the cursor always advances by the full *width*.
    """
    raw = decode_bytes(data, cursor, width)
    end = raw.find(b"\x00")
    if end != -1:
        raw = raw[:end]
    return raw.decode("utf-8", errors="replace")


def encode_string(value: str, width: int) -> bytes:
    """Encode *value* as UTF-8 into a NUL-padded field of *width* bytes.

    Text longer than the field is truncated.
    """
    return value.encode("utf-8")[:width].ljust(width, b"\x00")


def decode_timestamp(data: bytes | memoryview, cursor: Cursor) -> datetime:
    """Decode nanoseconds since the epoch into an aware UTC datetime."""
    nanos = _decode_struct(data, cursor, _U64)
    return datetime.fromtimestamp(nanos // 1_000_000_000, tz=UTC) + timedelta(
        microseconds=(nanos % 1_000_000_000) // 1000
    )


def encode_timestamp(value: datetime) -> bytes:
    """Encode a datetime as nanoseconds since the epoch."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    delta = value - datetime(1970, 1, 1, tzinfo=UTC)
    nanos = (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000
    return _U64.pack(nanos)


def decode_duration(data: bytes | memoryview, cursor: Cursor) -> timedelta:
    """Decode a nanosecond duration."""
    nanos = _decode_struct(data, cursor, _U64)
    return timedelta(microseconds=nanos // 1000)


def decode_uuid(data: bytes | memoryview, cursor: Cursor) -> str:
    """Decode a 16-byte identifier as 32 lowercase hex digits."""
    return decode_bytes(data, cursor, UUID_WIDTH).hex()


def encode_uuid(value: bytes | str) -> bytes:
    """Encode an identifier given as 16 raw bytes or a hex/UUID string."""
    if isinstance(value, str):
        value = bytes.fromhex(value.replace("-", ""))
    if len(value) != UUID_WIDTH:
        msg = f"Identifier must be {UUID_WIDTH} bytes, got {len(value)}"
        raise EncodeError(msg)
    return bytes(value)


def signal_to_rssi(signal: float) -> int:
    """Convert a signal level in milliwatts to RSSI in dBm, rounded.

    Non-positive levels map to :data:`NO_SIGNAL_RSSI`.
    """
    if signal <= 0:
        return NO_SIGNAL_RSSI
    return math.floor(10 * math.log10(signal) + 0.5)


def rssi_status(rssi: int) -> RssiStatus:
    """Classify an RSSI value.

    Besides negative dBm readings, some firmware reports small positive
    SNR-style values (4-16), which are bucketed separately.
    """
    if rssi == NO_SIGNAL_RSSI:
        return RssiStatus.NONE
    if rssi < -80 or rssi in (4, 5, 6):
        return RssiStatus.VERY_BAD
    if rssi < -70 or 7 <= rssi <= 11:
        return RssiStatus.SOMEWHAT_BAD
    if rssi < -60 or 12 <= rssi <= 16:
        return RssiStatus.ALRIGHT
    if rssi < 0 or rssi > 16:
        return RssiStatus.GOOD
    return RssiStatus.NONE


# --- State records ---


@dataclass(frozen=True, slots=True)
class StateService:
    """A service a device exposes and the port it listens on."""

    service: int
    port: int

    def to_dict(self) -> dict[str, Any]:
        return {"service": self.service, "port": self.port}


@dataclass(frozen=True, slots=True)
class StateVersion:
    vendor: int
    product: int

    def to_dict(self) -> dict[str, Any]:
        return {"vendor": self.vendor, "product": self.product}


@dataclass(frozen=True, slots=True)
class StateHostFirmware:
    build: datetime
    version_minor: int
    version_major: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "build": self.build.isoformat(),
            "version_minor": self.version_minor,
            "version_major": self.version_major,
        }


@dataclass(frozen=True, slots=True)
class StateWifiFirmware:
    build: datetime
    version_minor: int
    version_major: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "build": self.build.isoformat(),
            "version_minor": self.version_minor,
            "version_major": self.version_major,
        }


@dataclass(frozen=True, slots=True)
class StateWifiInfo:
    """Wi-Fi signal level in milliwatts."""

    signal: float

    @property
    def rssi(self) -> int:
        return signal_to_rssi(self.signal)

    @property
    def status(self) -> RssiStatus:
        return rssi_status(self.rssi)

    def to_dict(self) -> dict[str, Any]:
        return {"signal": self.signal, "rssi": self.rssi, "status": self.status.value}


@dataclass(frozen=True, slots=True)
class StateInfo:
    """Device clock and up/down time counters."""

    time: datetime
    uptime: timedelta
    downtime: timedelta

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time.isoformat(),
            "uptime": self.uptime.total_seconds(),
            "downtime": self.downtime.total_seconds(),
        }


@dataclass(frozen=True, slots=True)
class StateLocation:
    location: str
    label: str
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "label": self.label,
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class StateGroup:
    group: str
    label: str
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "group": self.group,
            "label": self.label,
            "updated_at": self.updated_at.isoformat(),
        }


# --- Decoders ---


def decode_state_service(data: bytes | memoryview, cursor: Cursor) -> StateService:
    service = _decode_struct(data, cursor, _U8)
    port = _decode_struct(data, cursor, _U32)
    return StateService(service=service, port=port)


def decode_state_power(data: bytes | memoryview, cursor: Cursor) -> int:
    """Decode a power level (0 off, 65535 on)."""
    return _decode_struct(data, cursor, _U16)


def decode_state_label(data: bytes | memoryview, cursor: Cursor) -> str:
    """Decode a 32-byte device label."""
    return decode_string(data, cursor, LABEL_WIDTH)


def decode_state_version(data: bytes | memoryview, cursor: Cursor) -> StateVersion:
    vendor = _decode_struct(data, cursor, _U32)
    product = _decode_struct(data, cursor, _U32)
    return StateVersion(vendor=vendor, product=product)


def decode_state_host_firmware(data: bytes | memoryview, cursor: Cursor) -> StateHostFirmware:
    build = decode_timestamp(data, cursor)
    decode_bytes(data, cursor, 8)  # reserved
    version_minor = _decode_struct(data, cursor, _U16)
    version_major = _decode_struct(data, cursor, _U16)
    return StateHostFirmware(build=build, version_minor=version_minor, version_major=version_major)


def decode_state_wifi_info(data: bytes | memoryview, cursor: Cursor) -> StateWifiInfo:
    signal = _decode_struct(data, cursor, _F32)
    decode_bytes(data, cursor, 10)  # reserved
    return StateWifiInfo(signal=signal)


def decode_state_wifi_firmware(data: bytes | memoryview, cursor: Cursor) -> StateWifiFirmware:
    build = decode_timestamp(data, cursor)
    decode_bytes(data, cursor, 8)  # reserved
    version_minor = _decode_struct(data, cursor, _U16)
    version_major = _decode_struct(data, cursor, _U16)
    return StateWifiFirmware(build=build, version_minor=version_minor, version_major=version_major)


def decode_state_info(data: bytes | memoryview, cursor: Cursor) -> StateInfo:
    time = decode_timestamp(data, cursor)
    uptime = decode_duration(data, cursor)
    downtime = decode_duration(data, cursor)
    return StateInfo(time=time, uptime=uptime, downtime=downtime)


def decode_state_location(data: bytes | memoryview, cursor: Cursor) -> StateLocation:
    location = decode_uuid(data, cursor)
    label = decode_string(data, cursor, LABEL_WIDTH)
    updated_at = decode_timestamp(data, cursor)
    return StateLocation(location=location, label=label, updated_at=updated_at)


def decode_state_group(data: bytes | memoryview, cursor: Cursor) -> StateGroup:
    group = decode_uuid(data, cursor)
    label = decode_string(data, cursor, LABEL_WIDTH)
    updated_at = decode_timestamp(data, cursor)
    return StateGroup(group=group, label=label, updated_at=updated_at)


def decode_echo_response(data: bytes | memoryview, cursor: Cursor) -> bytes:
    return decode_bytes(data, cursor, ECHO_PAYLOAD_WIDTH)


def decode_state_unhandled(data: bytes | memoryview, cursor: Cursor) -> int:
    """Decode the message type a device reported as unhandled."""
    return _decode_struct(data, cursor, _U16)


# --- Encoders ---


def encode_set_power(power: int | bool) -> bytes:
    """Encode a power level; booleans map to 65535 (on) and 0 (off)."""
    if isinstance(power, bool):
        power = 0xFFFF if power else 0
    if not 0 <= power <= 0xFFFF:
        msg = f"Power level must be 0-65535, got {power}"
        raise EncodeError(msg)
    return _U16.pack(power)


def encode_set_location(location: bytes | str, label: str, updated_at: datetime) -> bytes:
    return encode_uuid(location) + encode_string(label, LABEL_WIDTH) + encode_timestamp(updated_at)


def encode_set_group(group: bytes | str, label: str, updated_at: datetime) -> bytes:
    return encode_uuid(group) + encode_string(label, LABEL_WIDTH) + encode_timestamp(updated_at)


def encode_echo_request(echoing: bytes) -> bytes:
    """Pad (or truncate) *echoing* to the 64-byte echo payload."""
    return bytes(echoing[:ECHO_PAYLOAD_WIDTH]).ljust(ECHO_PAYLOAD_WIDTH, b"\x00")
