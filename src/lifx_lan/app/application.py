"""LIFX LAN application orchestrator.

Wires the UDP transport, the router, the client and the device
registry into a single object with async context-manager support.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lifx_lan.app.client import BROADCAST_ADDRESS, DEFAULT_PORT, LifxClient
from lifx_lan.app.devices import Devices
from lifx_lan.app.groups import Groups
from lifx_lan.app.router import Router
from lifx_lan.commands.device import get_service_command
from lifx_lan.encoding.header import NO_TARGET
from lifx_lan.encoding.payloads import Cursor, decode_state_group, decode_state_service
from lifx_lan.errors import DecodeError
from lifx_lan.transport.udp import UDPTransport
from lifx_lan.types.enums import MessageType, ServiceType

if TYPE_CHECKING:
    from lifx_lan.app.devices import Device
    from lifx_lan.commands.base import Command
    from lifx_lan.encoding.header import Message

logger = logging.getLogger(__name__)


@dataclass
class ClientConfig:
    """Configuration for a LIFX LAN session."""

    interface: str = "0.0.0.0"
    local_port: int = 0
    device_port: int = DEFAULT_PORT
    broadcast_address: str = BROADCAST_ADDRESS
    default_timeout: float = 3.0  # seconds
    broadcast_timeout: float = 1.0  # seconds
    retries: int = 0


class LifxApplication:
    """Central orchestrator connecting transport, router, client and registry."""

    def __init__(self, config: ClientConfig | None = None) -> None:
        self._config = config or ClientConfig()
        self._transport: UDPTransport | None = None
        self._router = Router(self._send, on_message=self._on_message)
        self._client = LifxClient(
            self._router,
            default_timeout=self._config.default_timeout,
            broadcast_timeout=self._config.broadcast_timeout,
            port=self._config.device_port,
            broadcast_address=self._config.broadcast_address,
        )
        self._groups = Groups()
        self._devices = Devices(
            on_removed=self._groups.remove_device,
            default_timeout=self._config.default_timeout,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def router(self) -> Router:
        return self._router

    @property
    def client(self) -> LifxClient:
        return self._client

    @property
    def devices(self) -> Devices:
        """Devices seen on the network so far."""
        return self._devices

    @property
    def groups(self) -> Groups:
        """Groups reported by devices in StateGroup replies."""
        return self._groups

    async def start(self) -> None:
        """Bind the transport and start routing inbound datagrams."""
        if self._transport is not None:
            return
        self._transport = UDPTransport(
            interface=self._config.interface,
            port=self._config.local_port,
        )
        self._transport.on_receive(self._on_datagram)
        await self._transport.start()

    async def stop(self) -> None:
        """Cancel pending requests and close the transport."""
        self._client.close()
        if self._transport is not None:
            await self._transport.stop()
            self._transport = None

    async def __aenter__(self) -> LifxApplication:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    async def discover(
        self,
        timeout: float | None = None,
        expected_count: int | None = None,
    ) -> list[Device]:
        """Broadcast GetService and return the devices that answered.

        :param timeout: Seconds to collect replies.
        :param expected_count: When set, return early once this many
            replies have arrived.
        """
        replies = await self._client.broadcast(
            get_service_command(), timeout=timeout, expected_count=expected_count
        )
        found: dict[str, Device] = {}
        for message in replies:
            device = self._devices.registered.get(message.serial_number)
            if device is not None:
                found[device.serial_number] = device
        logger.debug("discover found %d device(s)", len(found))
        return list(found.values())

    async def send(
        self, command: Command, device: Device, *, timeout: float | None = None
    ) -> Any:
        """Shortcut for :meth:`LifxClient.send` using the configured retries."""
        return await self._client.send(
            command, device, timeout=timeout, retries=self._config.retries
        )

    def _send(self, data: bytes, address: str, port: int) -> None:
        if self._transport is None:
            msg = "Application not started"
            raise RuntimeError(msg)
        self._transport.send(data, address, port)

    def _on_datagram(self, data: bytes, addr: tuple[str, int]) -> None:
        self._router.receive(data, addr[0], addr[1])

    def _on_message(self, message: Message) -> None:
        """Keep the device and group registries current from inbound replies."""
        if message.header.target == NO_TARGET or message.address is None:
            return
        port = message.port if message.port is not None else self._config.device_port
        if message.type == MessageType.STATE_SERVICE:
            try:
                service = decode_state_service(message.payload, Cursor())
            except DecodeError:
                logger.debug("Dropped malformed StateService from %s", message.address)
                return
            if service.service != ServiceType.UDP:
                return
            port = service.port
        device = self._devices.register(
            message.serial_number, message.address, port, message.header.target
        )
        if message.type == MessageType.STATE_GROUP:
            try:
                state = decode_state_group(message.payload, Cursor())
            except DecodeError:
                logger.debug("Dropped malformed StateGroup from %s", message.address)
                return
            self._groups.register(device, state)
