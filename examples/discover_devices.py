"""Discover LIFX devices on the local network.

Broadcasts GetService and prints every device that answers within the
listen window, together with its label.

Usage::

    python examples/discover_devices.py
"""

import asyncio
import logging

from lifx_lan import LifxApplication, LifxTimeoutError, get_label_command

# Use DEBUG for per-request traces
logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s %(message)s")


async def main() -> None:
    """Discover and list all LIFX devices."""
    async with LifxApplication() as app:
        devices = await app.discover(timeout=2.0)

        print(f"Found {len(devices)} device(s):\n")
        for device in devices:
            try:
                label = await app.send(get_label_command(), device)
            except LifxTimeoutError:
                label = "<no reply>"
            print(f"  Serial:  {device.serial_number}")
            print(f"  Address: {device.address}:{device.port}")
            print(f"  Label:   {label}")
            print()


if __name__ == "__main__":
    asyncio.run(main())
