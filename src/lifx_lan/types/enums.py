"""LIFX LAN protocol enumerations."""

from __future__ import annotations

from enum import Enum, IntEnum


class MessageType(IntEnum):
    """Device-level message type codes carried in the protocol header."""

    GET_SERVICE = 2
    STATE_SERVICE = 3
    GET_HOST_FIRMWARE = 14
    STATE_HOST_FIRMWARE = 15
    GET_WIFI_INFO = 16
    STATE_WIFI_INFO = 17
    GET_WIFI_FIRMWARE = 18
    STATE_WIFI_FIRMWARE = 19
    GET_POWER = 20
    SET_POWER = 21
    STATE_POWER = 22
    GET_LABEL = 23
    SET_LABEL = 24
    STATE_LABEL = 25
    GET_VERSION = 32
    STATE_VERSION = 33
    GET_INFO = 34
    STATE_INFO = 35
    SET_REBOOT = 38
    ACKNOWLEDGEMENT = 45
    GET_LOCATION = 48
    SET_LOCATION = 49
    STATE_LOCATION = 50
    GET_GROUP = 51
    SET_GROUP = 52
    STATE_GROUP = 53
    ECHO_REQUEST = 58
    ECHO_RESPONSE = 59
    STATE_UNHANDLED = 223


class ServiceType(IntEnum):
    """Services advertised in a StateService reply."""

    UDP = 1
    RESERVED2 = 2
    RESERVED3 = 3
    RESERVED4 = 4
    RESERVED5 = 5


class ResponseMode(Enum):
    """What a device is asked to send back for a unicast command."""

    RESPONSE = "response"
    ACK_ONLY = "ack-only"
    NONE = "none"


class RequestState(IntEnum):
    """Lifecycle of a pending unicast request or broadcast window."""

    PENDING = 0
    RESOLVED = 1
    TIMED_OUT = 2
    CANCELLED = 3
    FAILED = 4


class RssiStatus(Enum):
    """Qualitative Wi-Fi signal strength derived from an RSSI value."""

    NONE = "none"
    VERY_BAD = "very bad"
    SOMEWHAT_BAD = "somewhat bad"
    ALRIGHT = "alright"
    GOOD = "good"
