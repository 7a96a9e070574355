"""Builders for device-level commands (service, label, power, ...)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from lifx_lan.commands.base import Command
from lifx_lan.encoding import payloads
from lifx_lan.types.enums import MessageType, ResponseMode

if TYPE_CHECKING:
    from datetime import datetime


def get_service_command() -> Command:
    """Ask devices which services they expose; used for discovery."""
    return Command(type=MessageType.GET_SERVICE, decode=payloads.decode_state_service)


def get_host_firmware_command() -> Command:
    return Command(
        type=MessageType.GET_HOST_FIRMWARE, decode=payloads.decode_state_host_firmware
    )


def get_wifi_info_command() -> Command:
    return Command(type=MessageType.GET_WIFI_INFO, decode=payloads.decode_state_wifi_info)


def get_wifi_firmware_command() -> Command:
    return Command(
        type=MessageType.GET_WIFI_FIRMWARE, decode=payloads.decode_state_wifi_firmware
    )


def get_power_command() -> Command:
    return Command(type=MessageType.GET_POWER, decode=payloads.decode_state_power)


def set_power_command(power: int | bool) -> Command:
    return Command(
        type=MessageType.SET_POWER,
        payload=payloads.encode_set_power(power),
        decode=payloads.decode_state_power,
        response_mode=ResponseMode.ACK_ONLY,
    )


def get_label_command() -> Command:
    return Command(type=MessageType.GET_LABEL, decode=payloads.decode_state_label)


def set_label_command(label: str) -> Command:
    return Command(
        type=MessageType.SET_LABEL,
        payload=payloads.encode_string(label, payloads.LABEL_WIDTH),
        decode=payloads.decode_state_label,
        response_mode=ResponseMode.ACK_ONLY,
    )


def get_version_command() -> Command:
    return Command(type=MessageType.GET_VERSION, decode=payloads.decode_state_version)


def get_info_command() -> Command:
    return Command(type=MessageType.GET_INFO, decode=payloads.decode_state_info)


def set_reboot_command() -> Command:
    """Reboot the device; it does not reply."""
    return Command(type=MessageType.SET_REBOOT, response_mode=ResponseMode.NONE)


def get_location_command() -> Command:
    return Command(type=MessageType.GET_LOCATION, decode=payloads.decode_state_location)


def set_location_command(location: bytes | str, label: str, updated_at: datetime) -> Command:
    return Command(
        type=MessageType.SET_LOCATION,
        payload=payloads.encode_set_location(location, label, updated_at),
        decode=payloads.decode_state_location,
        response_mode=ResponseMode.ACK_ONLY,
    )


def get_group_command() -> Command:
    return Command(type=MessageType.GET_GROUP, decode=payloads.decode_state_group)


def set_group_command(group: bytes | str, label: str, updated_at: datetime) -> Command:
    return Command(
        type=MessageType.SET_GROUP,
        payload=payloads.encode_set_group(group, label, updated_at),
        decode=payloads.decode_state_group,
        response_mode=ResponseMode.ACK_ONLY,
    )


def echo_request_command(echoing: bytes) -> Command:
    return Command(
        type=MessageType.ECHO_REQUEST,
        payload=payloads.encode_echo_request(echoing),
        decode=payloads.decode_echo_response,
    )
