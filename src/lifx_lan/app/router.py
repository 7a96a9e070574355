"""Correlation of inbound replies with outstanding requests.

The router owns the mapping from *source* identifiers to the handlers
waiting for replies carrying that source.  It allocates sources,
dispatches decoded datagrams to the matching handlers, and hands
outbound bytes to an injected sender so that no socket is required to
exercise the correlation logic.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from lifx_lan.encoding.header import decode_message
from lifx_lan.errors import DecodeError, SourceExhaustionError, ValidationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from lifx_lan.encoding.header import Message

logger = logging.getLogger(__name__)

MAX_SOURCE = 0xFFFFFFFF


@runtime_checkable
class MessageHandler(Protocol):
    """Receives every decoded message correlated to a registered source."""

    def handle(self, message: Message) -> None:
        """Process one reply."""
        ...


class Router:
    """Routes reply datagrams to the handlers registered for their source.

    Each instance keeps its own source counter and handler map, so
    several routers can coexist in one process.
    """

    def __init__(
        self,
        on_send: Callable[[bytes, str, int], None],
        *,
        on_message: Callable[[Message], None] | None = None,
    ) -> None:
        """Create a router.

        :param on_send: Called with ``(data, address, port)`` for every
            outbound datagram.
        :param on_message: Optional observer called with every
            successfully decoded inbound message, matched or not.
        """
        self._on_send = on_send
        self._on_message = on_message
        self._handlers: dict[int, list[MessageHandler]] = {}
        self._next_source = 1

    def next_source(self) -> int:
        """Allocate the next source identifier.

        Values rotate through 1..0xFFFFFFFF; 0 is never returned and
        values currently registered are skipped.

        :raises SourceExhaustionError: If every value is registered.
        """
        for _ in range(min(MAX_SOURCE, len(self._handlers) + 1)):
            source = self._next_source
            self._next_source = source + 1 if source < MAX_SOURCE else 1
            if source not in self._handlers:
                return source
        raise SourceExhaustionError

    def register(self, source: int, handler: MessageHandler) -> None:
        """Register *handler* for replies carrying *source*.

        Handlers for the same source are invoked in registration order.
        Registering the same handler twice has no effect.

        :raises ValidationError: If *source* is outside 1..0xFFFFFFFF.
        """
        if not 1 <= source <= MAX_SOURCE:
            raise ValidationError("source", source, f"must be between 1 and {MAX_SOURCE}")
        handlers = self._handlers.setdefault(source, [])
        if handler not in handlers:
            handlers.append(handler)

    def deregister(self, source: int, handler: MessageHandler) -> None:
        """Remove *handler* from *source*; a no-op if it is not registered."""
        handlers = self._handlers.get(source)
        if handlers is None:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[source]

    def is_registered(self, source: int) -> bool:
        """True if at least one handler is registered for *source*."""
        return source in self._handlers

    @property
    def handler_count(self) -> int:
        """Total number of registered handlers across all sources."""
        return sum(len(handlers) for handlers in self._handlers.values())

    def __len__(self) -> int:
        return len(self._handlers)

    def send(self, data: bytes, address: str, port: int) -> None:
        """Transmit *data* through the injected sender."""
        self._on_send(data, address, port)

    def receive(
        self,
        data: bytes | memoryview,
        address: str | None = None,
        port: int | None = None,
    ) -> Message | None:
        """Decode a datagram and dispatch it to the handlers for its source.

        Malformed datagrams and datagrams whose source has no handler
        are dropped.

        :param data: Raw datagram bytes.
        :param address: Sender host, if known.
        :param port: Sender port, if known.
        :returns: The decoded message, or ``None`` if it was malformed.
        """
        try:
            message = decode_message(data, address, port)
        except DecodeError as exc:
            logger.debug("Dropped malformed datagram from %s:%s: %s", address, port, exc)
            return None

        if self._on_message is not None:
            try:
                self._on_message(message)
            except Exception:
                logger.exception("Unhandled error in message observer")

        handlers = self._handlers.get(message.source)
        if not handlers:
            logger.debug(
                "Dropped unmatched message type=%d source=%d from %s",
                message.type,
                message.source,
                message.serial_number,
            )
            return message

        # Handlers may deregister themselves while being invoked.
        for handler in tuple(handlers):
            try:
                handler.handle(message)
            except Exception:
                logger.exception("Unhandled error in message handler for source %d", message.source)
        return message
