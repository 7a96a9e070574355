"""Known-device bookkeeping keyed by serial number."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from lifx_lan.encoding.header import (
    NO_TARGET,
    serial_number_to_target,
    target_to_serial_number,
)
from lifx_lan.errors import LifxTimeoutError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger(__name__)

DEFAULT_PORT = 56700


@dataclass(slots=True)
class Device:
    """A LIFX device endpoint.

    ``sequence`` is advanced by the client for every unicast sent to
    the device.  When only one of ``target`` and ``serial_number`` is
    given, the other is derived from it.
    """

    address: str
    port: int = DEFAULT_PORT
    target: bytes = NO_TARGET
    serial_number: str = ""
    sequence: int = 0

    def __post_init__(self) -> None:
        if self.serial_number and self.target == NO_TARGET:
            self.target = serial_number_to_target(self.serial_number)
        elif not self.serial_number and self.target != NO_TARGET:
            self.serial_number = target_to_serial_number(self.target)
        self.sequence &= 0xFF

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-friendly dict."""
        return {
            "address": self.address,
            "port": self.port,
            "serial_number": self.serial_number,
            "sequence": self.sequence,
        }


class Devices:
    """Registry of devices seen on the network.

    :param on_added: Called with a device the first time it is registered.
    :param on_changed: Called when a known device's address or port changes.
    :param on_removed: Called with a device removed from the registry.
    :param default_timeout: Seconds :meth:`get` waits for an unknown device.
    """

    def __init__(
        self,
        *,
        on_added: Callable[[Device], None] | None = None,
        on_changed: Callable[[Device], None] | None = None,
        on_removed: Callable[[Device], None] | None = None,
        default_timeout: float = 3.0,
    ) -> None:
        self._on_added = on_added
        self._on_changed = on_changed
        self._on_removed = on_removed
        self._default_timeout = default_timeout
        self._known: dict[str, Device] = {}
        self._waiters: dict[str, list[asyncio.Future[Device]]] = {}

    @property
    def registered(self) -> dict[str, Device]:
        """Known devices keyed by serial number."""
        return self._known

    def __len__(self) -> int:
        return len(self._known)

    def __contains__(self, serial_number: object) -> bool:
        return serial_number in self._known

    def __iter__(self) -> Iterator[Device]:
        return iter(list(self._known.values()))

    def register(
        self,
        serial_number: str,
        address: str,
        port: int = DEFAULT_PORT,
        target: bytes | None = None,
    ) -> Device:
        """Record a device, or update the address of a known one.

        Pending :meth:`get` calls for *serial_number* are resolved.
        """
        device = self._known.get(serial_number)
        if device is None:
            device = Device(
                address=address,
                port=port,
                target=target if target is not None else serial_number_to_target(serial_number),
                serial_number=serial_number,
            )
            self._known[serial_number] = device
            logger.debug("Device %s added at %s:%d", serial_number, address, port)
            if self._on_added is not None:
                self._on_added(device)
        elif device.address != address or device.port != port:
            device.address = address
            device.port = port
            logger.debug("Device %s moved to %s:%d", serial_number, address, port)
            if self._on_changed is not None:
                self._on_changed(device)

        for waiter in self._waiters.pop(serial_number, []):
            if not waiter.done():
                waiter.set_result(device)
        return device

    def remove(self, serial_number: str) -> bool:
        """Forget a device.

        :returns: ``True`` if the device was known.
        """
        device = self._known.pop(serial_number, None)
        if device is None:
            return False
        if self._on_removed is not None:
            self._on_removed(device)
        return True

    async def get(self, serial_number: str, timeout: float | None = None) -> Device:
        """Return a known device, or wait until it is registered.

        :raises LifxTimeoutError: If the device does not appear in time.
        """
        device = self._known.get(serial_number)
        if device is not None:
            return device

        if timeout is None:
            timeout = self._default_timeout
        waiter: asyncio.Future[Device] = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(serial_number, []).append(waiter)
        try:
            return await asyncio.wait_for(waiter, timeout)
        except TimeoutError:
            raise LifxTimeoutError(timeout, f"device {serial_number} lookup") from None
        finally:
            waiters = self._waiters.get(serial_number)
            if waiters is not None:
                if waiter in waiters:
                    waiters.remove(waiter)
                if not waiters:
                    del self._waiters[serial_number]
