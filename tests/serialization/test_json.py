"""Tests for JSON serialization module."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from lifx_lan.app.devices import Device
from lifx_lan.app.groups import Group
from lifx_lan.encoding.header import decode_message, encode
from lifx_lan.errors import LifxTimeoutError
from lifx_lan.serialization import deserialize, serialize
from lifx_lan.serialization.json import JsonSerializer, json_default
from lifx_lan.types.enums import MessageType, ResponseMode


class TestJsonSerializerRoundTrip:
    def test_encode_decode_plain_dict(self):
        s = JsonSerializer()
        data = {"label": "Switch", "power": 65535, "on": True}
        assert s.decode(s.encode(data)) == data

    def test_decode_non_object(self):
        with pytest.raises(TypeError, match="Expected JSON object"):
            JsonSerializer().decode(b"[1, 2]")


class TestJsonSerializerOptions:
    def test_pretty_produces_indented_output(self):
        text = JsonSerializer(pretty=True).encode({"a": 1}).decode("utf-8")
        assert "\n" in text
        assert "  " in text

    def test_sort_keys_produces_sorted_keys(self):
        text = JsonSerializer(sort_keys=True).encode({"z": 1, "a": 2, "m": 3}).decode("utf-8")
        keys = list(json.loads(text).keys())
        assert keys == sorted(keys)


class TestJsonDefault:
    def test_bytes_as_hex(self):
        assert json_default(b"\xd0\x73") == "d073"

    def test_memoryview_as_hex(self):
        assert json_default(memoryview(b"\x01\x02")) == "0102"

    def test_int_enum(self):
        assert json_default(MessageType.STATE_LABEL) == 25

    def test_plain_enum(self):
        assert json_default(ResponseMode.ACK_ONLY) == "ack-only"

    def test_timedelta(self):
        assert json_default(timedelta(seconds=90)) == 90.0

    def test_unsupported_type(self):
        with pytest.raises(TypeError, match="Cannot serialize object"):
            json_default(object())


class TestSerialize:
    def test_serialize_message(self):
        message = decode_message(
            encode(False, 7, bytes.fromhex("d073d5000001"), False, False, 3, 25, b"\x41"),
            "10.0.0.1",
            56700,
        )
        result = deserialize(serialize(message))
        assert result["header"]["source"] == 7
        assert result["header"]["target"] == "d073d5000001"
        assert result["payload"] == "41"
        assert result["address"] == "10.0.0.1"

    def test_serialize_device(self):
        device = Device(address="10.0.0.1", serial_number="d073d5000001")
        assert deserialize(serialize(device))["serial_number"] == "d073d5000001"

    def test_serialize_error(self):
        result = deserialize(serialize(LifxTimeoutError(1.5, "device response")))
        assert result["name"] == "LifxTimeoutError"
        assert result["context"] == {"timeout": 1.5, "operation": "device response"}

    def test_serialize_plain_dict_sorted(self):
        assert serialize({"b": 1, "a": 2}, sort_keys=True) == b'{"a":2,"b":1}'

    def test_serialize_group(self):
        device = Device(address="10.0.0.1", serial_number="d073d5000001")
        group = Group(uuid="00" * 16, label="Lounge", devices=[device])
        assert deserialize(serialize(group))["devices"] == ["d073d5000001"]
