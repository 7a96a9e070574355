"""Grouping of known devices by the group they report in StateGroup."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from lifx_lan.app.devices import Device
    from lifx_lan.encoding.payloads import StateGroup

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Group:
    """A device group and its current members."""

    uuid: str
    label: str
    devices: list[Device] = field(default_factory=list)

    def __contains__(self, device: object) -> bool:
        return any(member is device for member in self.devices)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-friendly dict."""
        return {
            "uuid": self.uuid,
            "label": self.label,
            "devices": [device.serial_number for device in self.devices],
        }


class Groups:
    """Registry of groups keyed by group UUID.

    Membership is by device identity, so a :class:`Device` whose
    address changes stays in its groups.

    :param on_added: Called with a group the first time it is seen.
    :param on_changed: Called when a group gains or loses a device.
    :param on_removed: Called with a group that was removed or emptied.
    """

    def __init__(
        self,
        *,
        on_added: Callable[[Group], None] | None = None,
        on_changed: Callable[[Group], None] | None = None,
        on_removed: Callable[[Group], None] | None = None,
    ) -> None:
        self._on_added = on_added
        self._on_changed = on_changed
        self._on_removed = on_removed
        self._known: dict[str, Group] = {}

    @property
    def registered(self) -> dict[str, Group]:
        """Known groups keyed by UUID."""
        return self._known

    def __len__(self) -> int:
        return len(self._known)

    def __contains__(self, uuid: object) -> bool:
        return uuid in self._known

    def __iter__(self) -> Iterator[Group]:
        return iter(list(self._known.values()))

    def register(self, device: Device, state: StateGroup) -> Group:
        """Add *device* to the group described by *state*.

        The group is created on first sight; registering a device that
        is already a member has no effect.
        """
        group = self._known.get(state.group)
        if group is None:
            group = Group(uuid=state.group, label=state.label, devices=[device])
            self._known[state.group] = group
            logger.debug("Group %s (%s) added", state.group, state.label)
            if self._on_added is not None:
                self._on_added(group)
        elif device not in group:
            group.devices.append(device)
            if self._on_changed is not None:
                self._on_changed(group)
        return group

    def remove(self, uuid: str) -> bool:
        """Forget a group.

        :returns: ``True`` if the group was known.
        """
        group = self._known.pop(uuid, None)
        if group is None:
            return False
        logger.debug("Group %s removed", uuid)
        if self._on_removed is not None:
            self._on_removed(group)
        return True

    def remove_device(self, device: Device) -> None:
        """Drop *device* from every group; groups left empty are removed."""
        for group in list(self._known.values()):
            for index, member in enumerate(group.devices):
                if member is device:
                    break
            else:
                continue
            # Swap-remove; member order is not significant.
            group.devices[index] = group.devices[-1]
            group.devices.pop()
            if not group.devices:
                self.remove(group.uuid)
            elif self._on_changed is not None:
                self._on_changed(group)
