"""LIFX LAN transport using asyncio UDP."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class _UDPProtocol(asyncio.DatagramProtocol):
    """Datagram protocol bound to the :class:`UDPTransport` that created it."""

    def __init__(self, owner: UDPTransport) -> None:
        self._owner = owner

    def datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        self._owner._on_datagram_received(data, addr)

    def error_received(self, exc: Exception) -> None:
        # ICMP errors for one destination do not close the socket.
        logger.warning("UDP send to a device failed: %s", exc)

    def connection_lost(self, exc: Exception | None) -> None:
        if exc is not None:
            logger.warning("UDP socket lost: %s", exc)
        else:
            logger.debug("UDP socket closed")
        self._owner._on_connection_lost(exc)


class UDPTransport:
    """UDP socket carrying LIFX datagrams.

    Pass :meth:`send` as the router's sender and feed the router from
    :meth:`on_receive`.
    """

    def __init__(
        self,
        interface: str = "0.0.0.0",
        port: int = 0,
        *,
        allow_broadcast: bool = True,
    ) -> None:
        """Initialize the transport.

        :param interface: Local IP address to bind. ``"0.0.0.0"`` binds all
            interfaces.
        :param port: Local UDP port; ``0`` picks an ephemeral port.
        :param allow_broadcast: Enable ``SO_BROADCAST`` for discovery.
        """
        self._interface = interface
        self._port = port
        self._allow_broadcast = allow_broadcast
        self._protocol: _UDPProtocol | None = None
        self._transport: asyncio.DatagramTransport | None = None
        self._receive_callback: Callable[[bytes, tuple[str, int]], None] | None = None
        self._local_address: tuple[str, int] | None = None

    async def start(self) -> None:
        """Bind the UDP socket and start listening."""
        if self._transport is not None:
            return
        loop = asyncio.get_running_loop()
        transport, protocol = await loop.create_datagram_endpoint(
            lambda: _UDPProtocol(self),
            local_addr=(self._interface, self._port),
            allow_broadcast=self._allow_broadcast,
        )
        self._transport = transport
        self._protocol = protocol

        sock = transport.get_extra_info("socket")
        addr: tuple[str, int] = sock.getsockname()
        self._local_address = (addr[0], addr[1])
        logger.info("UDPTransport started on %s:%d", addr[0], addr[1])

    async def stop(self) -> None:
        """Close the UDP socket."""
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            self._protocol = None
            logger.info("UDPTransport stopped")

    @property
    def is_running(self) -> bool:
        return self._transport is not None

    @property
    def local_address(self) -> tuple[str, int]:
        """The bound ``(host, port)`` of this transport."""
        if self._local_address is None:
            msg = "Transport not started"
            raise RuntimeError(msg)
        return self._local_address

    def on_receive(self, callback: Callable[[bytes, tuple[str, int]], None]) -> None:
        """Register a callback called with ``(data, (host, port))`` per datagram."""
        self._receive_callback = callback

    def send(self, data: bytes, address: str, port: int) -> None:
        """Send a datagram to ``address:port``."""
        if self._transport is None:
            msg = "Transport not started"
            raise RuntimeError(msg)
        self._transport.sendto(data, (address, port))

    def _on_datagram_received(self, data: bytes, addr: tuple[str, int]) -> None:
        if self._receive_callback is None:
            return
        self._receive_callback(data, addr)

    def _on_connection_lost(self, exc: Exception | None) -> None:
        self._transport = None
        self._protocol = None
