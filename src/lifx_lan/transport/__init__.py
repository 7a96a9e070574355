"""Network transports for LIFX LAN datagrams."""

from lifx_lan.transport.udp import UDPTransport

__all__ = ["UDPTransport"]
