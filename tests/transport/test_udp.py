"""Tests for the UDP transport (udp.py)."""

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from lifx_lan.transport.udp import UDPTransport, _UDPProtocol


class TestUDPTransportDefaults:
    def test_default_interface(self):
        assert UDPTransport()._interface == "0.0.0.0"

    def test_default_port_is_ephemeral(self):
        assert UDPTransport()._port == 0

    def test_broadcast_enabled_by_default(self):
        assert UDPTransport()._allow_broadcast is True

    def test_initial_state(self):
        transport = UDPTransport()
        assert transport._transport is None
        assert transport._receive_callback is None
        assert not transport.is_running


class TestUDPTransportNotStarted:
    def test_send_raises(self):
        with pytest.raises(RuntimeError, match="Transport not started"):
            UDPTransport().send(b"\x01", "10.0.0.1", 56700)

    def test_local_address_raises(self):
        with pytest.raises(RuntimeError, match="Transport not started"):
            _ = UDPTransport().local_address


class TestUDPProtocol:
    def test_datagram_received_reaches_callback(self):
        transport = UDPTransport()
        callback = MagicMock()
        transport.on_receive(callback)
        _UDPProtocol(transport).datagram_received(b"\x24\x00", ("192.168.1.10", 56700))
        callback.assert_called_once_with(b"\x24\x00", ("192.168.1.10", 56700))

    def test_error_received_logs_warning(self, caplog):
        transport = UDPTransport()
        callback = MagicMock()
        transport.on_receive(callback)
        with caplog.at_level(logging.WARNING, logger="lifx_lan.transport.udp"):
            _UDPProtocol(transport).error_received(OSError("Connection refused"))
        assert "UDP send to a device failed" in caplog.text
        assert "Connection refused" in caplog.text
        callback.assert_not_called()

    def test_connection_lost_with_exception(self, caplog):
        transport = UDPTransport()
        transport._transport = MagicMock()
        with caplog.at_level(logging.WARNING, logger="lifx_lan.transport.udp"):
            _UDPProtocol(transport).connection_lost(OSError("Socket closed unexpectedly"))
        assert "UDP socket lost" in caplog.text
        assert not transport.is_running

    def test_connection_lost_without_exception(self, caplog):
        transport = UDPTransport()
        transport._transport = MagicMock()
        with caplog.at_level(logging.DEBUG, logger="lifx_lan.transport.udp"):
            _UDPProtocol(transport).connection_lost(None)
        assert "UDP socket closed" in caplog.text
        assert not transport.is_running


class TestOnDatagramReceived:
    def test_forwards_to_callback(self):
        transport = UDPTransport()
        callback = MagicMock()
        transport.on_receive(callback)
        transport._on_datagram_received(b"\x01", ("10.0.0.1", 56700))
        callback.assert_called_once_with(b"\x01", ("10.0.0.1", 56700))

    def test_no_callback_is_noop(self):
        UDPTransport()._on_datagram_received(b"\x01", ("10.0.0.1", 56700))

    def test_connection_lost_clears_transport(self):
        transport = UDPTransport()
        transport._transport = MagicMock()
        transport._on_connection_lost(None)
        assert not transport.is_running


class TestStartStop:
    """Start/stop lifecycle with a real asyncio UDP socket."""

    async def test_start_sets_local_address(self):
        transport = UDPTransport(interface="127.0.0.1")
        try:
            await transport.start()
            host, port = transport.local_address
            assert host == "127.0.0.1"
            assert port > 0
            assert transport.is_running
        finally:
            await transport.stop()

    async def test_start_idempotent(self):
        transport = UDPTransport(interface="127.0.0.1")
        try:
            await transport.start()
            first = transport.local_address
            await transport.start()
            assert transport.local_address == first
        finally:
            await transport.stop()

    async def test_stop_clears_transport(self):
        transport = UDPTransport(interface="127.0.0.1")
        await transport.start()
        await transport.stop()
        assert transport._transport is None
        assert transport._protocol is None

    async def test_stop_when_not_started(self):
        await UDPTransport().stop()

    async def test_loopback_datagram(self):
        receiver = UDPTransport(interface="127.0.0.1")
        sender = UDPTransport(interface="127.0.0.1")
        received: asyncio.Future = asyncio.get_running_loop().create_future()
        receiver.on_receive(lambda data, addr: received.done() or received.set_result((data, addr)))
        try:
            await receiver.start()
            await sender.start()
            sender.send(b"hello", *receiver.local_address)
            data, addr = await asyncio.wait_for(received, 2.0)
            assert data == b"hello"
            assert addr == sender.local_address
        finally:
            await sender.stop()
            await receiver.stop()
