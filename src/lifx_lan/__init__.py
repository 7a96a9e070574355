"""lifx-lan: Asynchronous LIFX LAN protocol client for Python 3.11+.

Typical usage::

    from lifx_lan import LifxApplication, get_label_command

    async with LifxApplication() as app:
        for device in await app.discover(timeout=1.0):
            print(device.serial_number, await app.send(get_label_command(), device))
"""

__version__ = "0.1.0"

from lifx_lan.app.application import ClientConfig, LifxApplication
from lifx_lan.app.client import LifxClient, PendingBroadcast, PendingRequest
from lifx_lan.app.devices import Device, Devices
from lifx_lan.app.groups import Group, Groups
from lifx_lan.app.router import MessageHandler, Router
from lifx_lan.commands import (
    Command,
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
from lifx_lan.encoding.header import Header, Message, decode_header, encode
from lifx_lan.errors import (
    DecodeError,
    DisposedClientError,
    EncodeError,
    LifxError,
    LifxTimeoutError,
    SourceExhaustionError,
    UnhandledCommandError,
    ValidationError,
)
from lifx_lan.serialization import deserialize, serialize
from lifx_lan.transport.udp import UDPTransport
from lifx_lan.types.enums import (
    MessageType,
    RequestState,
    ResponseMode,
    RssiStatus,
    ServiceType,
)

__all__ = [
    "ClientConfig",
    "Command",
    "DecodeError",
    "Device",
    "Devices",
    "DisposedClientError",
    "EncodeError",
    "Group",
    "Groups",
    "Header",
    "LifxApplication",
    "LifxClient",
    "LifxError",
    "LifxTimeoutError",
    "Message",
    "MessageHandler",
    "MessageType",
    "PendingBroadcast",
    "PendingRequest",
    "RequestState",
    "ResponseMode",
    "Router",
    "RssiStatus",
    "ServiceType",
    "SourceExhaustionError",
    "UDPTransport",
    "UnhandledCommandError",
    "ValidationError",
    "__version__",
    "decode_header",
    "deserialize",
    "echo_request_command",
    "encode",
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
    "serialize",
    "set_group_command",
    "set_label_command",
    "set_location_command",
    "set_power_command",
    "set_reboot_command",
]
