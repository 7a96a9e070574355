"""Tests for the group registry."""

from datetime import UTC, datetime

from lifx_lan.app.groups import Group, Groups
from lifx_lan.encoding.payloads import StateGroup
from tests.helpers import make_device

GROUP_ID = "000102030405060708090a0b0c0d0e0f"
OTHER_ID = "ffeeddccbbaa99887766554433221100"
WHEN = datetime(2020, 9, 13, 12, 26, 40, tzinfo=UTC)


def _state(group=GROUP_ID, label="Lounge"):
    return StateGroup(group=group, label=label, updated_at=WHEN)


class TestGroup:
    def test_contains_by_identity(self):
        device = make_device()
        group = Group(uuid=GROUP_ID, label="Lounge", devices=[device])
        assert device in group
        assert make_device() not in group

    def test_to_dict(self):
        group = Group(uuid=GROUP_ID, label="Lounge", devices=[make_device()])
        assert group.to_dict() == {
            "uuid": GROUP_ID,
            "label": "Lounge",
            "devices": ["d073d5000001"],
        }


class TestRegister:
    def test_new_group(self):
        added = []
        groups = Groups(on_added=added.append)
        device = make_device()
        group = groups.register(device, _state())
        assert group.label == "Lounge"
        assert group.devices == [device]
        assert added == [group]
        assert GROUP_ID in groups
        assert len(groups) == 1

    def test_second_device_joins(self):
        changed = []
        groups = Groups(on_changed=changed.append)
        first = make_device()
        second = make_device("d073d5000002", "192.168.1.11")
        groups.register(first, _state())
        group = groups.register(second, _state())
        assert group.devices == [first, second]
        assert changed == [group]

    def test_existing_member_is_noop(self):
        added = []
        changed = []
        groups = Groups(on_added=added.append, on_changed=changed.append)
        device = make_device()
        groups.register(device, _state())
        groups.register(device, _state())
        assert len(groups.registered[GROUP_ID].devices) == 1
        assert len(added) == 1
        assert changed == []

    def test_iteration(self):
        groups = Groups()
        device = make_device()
        groups.register(device, _state())
        groups.register(device, _state(OTHER_ID, "Kitchen"))
        assert sorted(group.label for group in groups) == ["Kitchen", "Lounge"]


class TestRemove:
    def test_remove(self):
        removed = []
        groups = Groups(on_removed=removed.append)
        group = groups.register(make_device(), _state())
        assert groups.remove(GROUP_ID)
        assert removed == [group]
        assert len(groups) == 0

    def test_remove_unknown(self):
        removed = []
        groups = Groups(on_removed=removed.append)
        assert not groups.remove(GROUP_ID)
        assert removed == []

    def test_remove_device_keeps_others(self):
        changed = []
        groups = Groups(on_changed=changed.append)
        first = make_device()
        second = make_device("d073d5000002", "192.168.1.11")
        third = make_device("d073d5000003", "192.168.1.12")
        for device in (first, second, third):
            groups.register(device, _state())
        changed.clear()
        groups.remove_device(first)
        group = groups.registered[GROUP_ID]
        assert group.devices == [third, second]
        assert changed == [group]

    def test_remove_last_device_removes_group(self):
        removed = []
        groups = Groups(on_removed=removed.append)
        device = make_device()
        group = groups.register(device, _state())
        groups.remove_device(device)
        assert removed == [group]
        assert GROUP_ID not in groups

    def test_remove_device_from_every_group(self):
        groups = Groups()
        device = make_device()
        other = make_device("d073d5000002", "192.168.1.11")
        groups.register(device, _state())
        groups.register(device, _state(OTHER_ID, "Kitchen"))
        groups.register(other, _state(OTHER_ID, "Kitchen"))
        groups.remove_device(device)
        assert GROUP_ID not in groups
        assert groups.registered[OTHER_ID].devices == [other]

    def test_remove_non_member(self):
        changed = []
        groups = Groups(on_changed=changed.append)
        groups.register(make_device(), _state())
        groups.remove_device(make_device("d073d5000002"))
        assert len(groups.registered[GROUP_ID].devices) == 1
        assert changed == []
