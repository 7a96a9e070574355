"""Exception types raised by the LIFX LAN client."""

from __future__ import annotations

from typing import Any


class LifxError(Exception):
    """Base exception for LIFX protocol errors.

    Carries an optional ``context`` dict with structured details about
    the failure.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        self.context: dict[str, Any] = context or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-friendly dict."""
        return {
            "name": type(self).__name__,
            "message": str(self),
            "context": self.context,
        }


class DecodeError(LifxError, ValueError):
    """A buffer could not be decoded (truncated or size mismatch)."""


class EncodeError(LifxError, ValueError):
    """A message could not be encoded (oversized payload or target)."""


class ValidationError(LifxError, ValueError):
    """An argument is outside the range accepted by the protocol."""

    def __init__(self, parameter: str, value: object, reason: str | None = None) -> None:
        self.parameter = parameter
        self.value = value
        self.reason = reason
        detail = f" ({reason})" if reason else ""
        super().__init__(
            f"Invalid {parameter}: {value!r}{detail}",
            {"parameter": parameter, "reason": reason},
        )


class LifxTimeoutError(LifxError, TimeoutError):
    """No matching reply arrived before the deadline."""

    def __init__(self, timeout: float, operation: str = "operation") -> None:
        self.timeout = timeout
        self.operation = operation
        super().__init__(
            f"{operation} timed out after {timeout:g}s",
            {"timeout": timeout, "operation": operation},
        )


class UnhandledCommandError(LifxError):
    """The device answered with StateUnhandled for the request type."""

    def __init__(self, command_type: int, serial_number: str | None = None) -> None:
        self.command_type = command_type
        self.serial_number = serial_number
        super().__init__(
            f"Device {serial_number or 'unknown'} returned unhandled command type: {command_type}",
            {"command_type": command_type, "serial_number": serial_number},
        )


class SourceExhaustionError(LifxError):
    """Every source identifier is currently registered."""

    def __init__(self) -> None:
        super().__init__("No more source IDs available")


class DisposedClientError(LifxError):
    """The client has been closed and cannot send further requests."""

    def __init__(self) -> None:
        super().__init__("Cannot use a closed client")
