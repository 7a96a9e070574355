"""Shared test utilities for lifx-lan tests."""

from __future__ import annotations

from lifx_lan.app.devices import Device
from lifx_lan.encoding.header import decode_header, encode
from lifx_lan.types.enums import MessageType

SERIAL = "d073d5000001"
TARGET = bytes.fromhex(SERIAL)


class SentCollector:
    """Fake router sender recording every outbound datagram."""

    def __init__(self) -> None:
        self.sent: list[tuple[bytes, str, int]] = []

    def __call__(self, data: bytes, address: str, port: int) -> None:
        self.sent.append((data, address, port))

    @property
    def last(self) -> bytes:
        return self.sent[-1][0]

    def clear(self) -> None:
        self.sent.clear()


class FailingSender:
    """Sender whose every call raises ``OSError``."""

    def __call__(self, data: bytes, address: str, port: int) -> None:
        msg = "network unreachable"
        raise OSError(msg)


def make_device(serial_number: str = SERIAL, address: str = "192.168.1.10") -> Device:
    return Device(address=address, serial_number=serial_number)


def make_reply(
    request: bytes,
    msg_type: int = MessageType.STATE_LABEL,
    payload: bytes = b"",
    *,
    target: bytes = TARGET,
    sequence: int | None = None,
) -> bytes:
    """Build a device reply carrying the source (and sequence) of *request*."""
    header = decode_header(request)
    return encode(
        False,
        header.source,
        target,
        False,
        False,
        header.sequence if sequence is None else sequence,
        msg_type,
        payload,
    )
