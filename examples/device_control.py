"""Toggle the power of a single LIFX device.

Looks the device up by serial number, reads its power level and
flips it, waiting for the device's acknowledgement.

Usage::

    python examples/device_control.py d073d5000001
"""

import asyncio
import logging
import sys

from lifx_lan import ClientConfig, LifxApplication, get_power_command, set_power_command

logging.basicConfig(level=logging.INFO, format="%(name)s %(levelname)s %(message)s")


async def main() -> None:
    """Flip the power state of the device given on the command line."""
    serial_number = sys.argv[1] if len(sys.argv) > 1 else "d073d5000001"
    async with LifxApplication(ClientConfig(retries=2)) as app:
        # Populates the registry from StateService replies
        await app.discover(timeout=1.0)
        device = await app.devices.get(serial_number, timeout=2.0)

        level = await app.send(get_power_command(), device)
        print(f"{serial_number} power is {'on' if level else 'off'}")

        await app.client.send_only_acknowledgement(set_power_command(not level), device)
        print(f"{serial_number} switched {'off' if level else 'on'}")


if __name__ == "__main__":
    asyncio.run(main())
