"""Commands understood by LIFX devices."""

from lifx_lan.commands.base import Command
from lifx_lan.commands.device import (
    echo_request_command,
    get_group_command,
    get_host_firmware_command,
    get_info_command,
    get_label_command,
    get_location_command,
    get_power_command,
    get_service_command,
    get_version_command,
    get_wifi_firmware_command,
    get_wifi_info_command,
    set_group_command,
    set_label_command,
    set_location_command,
    set_power_command,
    set_reboot_command,
)

__all__ = [
    "Command",
    "echo_request_command",
    "get_group_command",
    "get_host_firmware_command",
    "get_info_command",
    "get_label_command",
    "get_location_command",
    "get_power_command",
    "get_service_command",
    "get_version_command",
    "get_wifi_firmware_command",
    "get_wifi_info_command",
    "set_group_command",
    "set_label_command",
    "set_location_command",
    "set_power_command",
    "set_reboot_command",
]
