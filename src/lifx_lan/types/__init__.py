"""Protocol enumerations."""

from lifx_lan.types.enums import (
    MessageType,
    RequestState,
    ResponseMode,
    RssiStatus,
    ServiceType,
)

__all__ = ["MessageType", "RequestState", "ResponseMode", "RssiStatus", "ServiceType"]
