"""Client session layer: unicast requests and broadcast windows.

Every operation allocates its own source from the :class:`Router`,
registers a handler for it, transmits, and waits.  A unicast request
ends exactly once (reply, timeout or cancellation) and a broadcast
window ends when its deadline elapses; in every case the deadline
timer is cancelled and the handler deregistered before the result is
delivered.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from lifx_lan.encoding.header import NO_TARGET, encode
from lifx_lan.encoding.payloads import Cursor, decode_state_unhandled
from lifx_lan.errors import (
    DecodeError,
    DisposedClientError,
    LifxTimeoutError,
    UnhandledCommandError,
    ValidationError,
)
from lifx_lan.types.enums import MessageType, RequestState, ResponseMode

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from lifx_lan.app.devices import Device
    from lifx_lan.app.router import Router
    from lifx_lan.commands.base import Command
    from lifx_lan.encoding.header import Message

logger = logging.getLogger(__name__)

DEFAULT_PORT = 56700
BROADCAST_ADDRESS = "255.255.255.255"
BROADCAST_SEQUENCE = 0xFF


class _PendingOperation(ABC):
    """Shared lifecycle of a registered handler paired with a deadline timer."""

    def __init__(
        self,
        router: Router,
        source: int,
        future: asyncio.Future[Any],
        on_finished: Callable[[_PendingOperation], None],
    ) -> None:
        self._router = router
        self._source = source
        self._future = future
        self._on_finished = on_finished
        self._timeout_handle: asyncio.TimerHandle | None = None
        self._state = RequestState.PENDING
        # Covers cancellation of the future by an awaiting task.
        future.add_done_callback(self._on_future_done)

    @property
    def source(self) -> int:
        return self._source

    @property
    def state(self) -> RequestState:
        return self._state

    @property
    def future(self) -> asyncio.Future[Any]:
        return self._future

    def done(self) -> bool:
        return self._state is not RequestState.PENDING

    def cancel(self) -> bool:
        """Cancel the operation.

        The timer and handler are torn down before this returns, so a
        reply arriving afterwards is dropped by the router.

        :returns: ``False`` if the operation had already finished.
        """
        if self._state is not RequestState.PENDING:
            return False
        self._state = RequestState.CANCELLED
        self._teardown()
        self._future.cancel()
        logger.debug("Cancelled source=%d", self._source)
        return True

    def __await__(self) -> Generator[Any, None, Any]:
        return self._future.__await__()

    def arm(self, timeout: float) -> None:
        """Start the deadline timer."""
        loop = self._future.get_loop()
        self._timeout_handle = loop.call_later(timeout, self._on_timeout)

    @abstractmethod
    def handle(self, message: Message) -> None:
        """Process a reply correlated to this source."""

    @abstractmethod
    def _on_timeout(self) -> None: ...

    def resolve(self, result: Any) -> None:
        """Settle the operation with *result*; ignored once finished."""
        if self._state is not RequestState.PENDING:
            return
        self._state = RequestState.RESOLVED
        self._teardown()
        self._future.set_result(result)

    def reject(self, state: RequestState, exc: BaseException) -> None:
        """Settle the operation with *exc*, entering *state*."""
        if self._state is not RequestState.PENDING:
            return
        self._state = state
        self._teardown()
        self._future.set_exception(exc)

    def _teardown(self) -> None:
        if self._timeout_handle is not None:
            self._timeout_handle.cancel()
            self._timeout_handle = None
        self._router.deregister(self._source, self)
        self._on_finished(self)

    def _on_future_done(self, future: asyncio.Future[Any]) -> None:
        if future.cancelled() and self._state is RequestState.PENDING:
            self._state = RequestState.CANCELLED
            self._teardown()


class PendingRequest(_PendingOperation):
    """A unicast request awaiting at most one reply.

    Await the instance (or its :attr:`future`) for the reply
    :class:`~lifx_lan.encoding.header.Message`.
    """

    def __init__(
        self,
        router: Router,
        source: int,
        future: asyncio.Future[Message | None],
        on_finished: Callable[[_PendingOperation], None],
        *,
        sequence: int,
        response_mode: ResponseMode,
        timeout: float,
        serial_number: str | None = None,
    ) -> None:
        super().__init__(router, source, future, on_finished)
        self.sequence = sequence
        self.response_mode = response_mode
        self.timeout = timeout
        self.serial_number = serial_number

    def handle(self, message: Message) -> None:
        """Resolve or reject from a reply correlated to this source."""
        if self._state is not RequestState.PENDING or self._future.done():
            return
        if message.sequence != self.sequence:
            logger.debug(
                "Ignored reply source=%d with sequence %d (expected %d)",
                self._source,
                message.sequence,
                self.sequence,
            )
            return

        if message.type == MessageType.ACKNOWLEDGEMENT:
            if self.response_mode is ResponseMode.ACK_ONLY:
                self.resolve(message)
            return

        if message.type == MessageType.STATE_UNHANDLED:
            try:
                request_type = decode_state_unhandled(message.payload, Cursor())
            except DecodeError:
                request_type = -1
            self.reject(
                RequestState.FAILED,
                UnhandledCommandError(request_type, self.serial_number or message.serial_number),
            )
            return

        if self.response_mode is ResponseMode.RESPONSE:
            self.resolve(message)

    def _on_timeout(self) -> None:
        self._timeout_handle = None
        logger.debug("Request source=%d timed out after %gs", self._source, self.timeout)
        self.reject(
            RequestState.TIMED_OUT,
            LifxTimeoutError(self.timeout, "device response"),
        )


class PendingBroadcast(_PendingOperation):
    """A broadcast window collecting every reply until its deadline.

    The deadline is the normal end of a broadcast: the future resolves
    with the replies received so far, possibly none.
    """

    def __init__(
        self,
        router: Router,
        source: int,
        future: asyncio.Future[list[Message]],
        on_finished: Callable[[_PendingOperation], None],
        *,
        timeout: float,
        expected_count: int | None = None,
    ) -> None:
        super().__init__(router, source, future, on_finished)
        self.timeout = timeout
        self.expected_count = expected_count
        self._replies: list[Message] = []

    @property
    def replies(self) -> list[Message]:
        """Replies received so far."""
        return list(self._replies)

    def handle(self, message: Message) -> None:
        if self._state is not RequestState.PENDING or self._future.done():
            return
        self._replies.append(message)
        if self.expected_count is not None and len(self._replies) >= self.expected_count:
            self.resolve(list(self._replies))

    def _on_timeout(self) -> None:
        self._timeout_handle = None
        logger.debug(
            "Broadcast source=%d window closed with %d replies",
            self._source,
            len(self._replies),
        )
        self.resolve(list(self._replies))


class LifxClient:
    """Sends commands to LIFX devices through a :class:`Router`.

    :param router: Router used for source allocation and transmission.
        Feed inbound datagrams to :meth:`Router.receive`.
    :param default_timeout: Seconds a unicast request waits for a reply.
    :param broadcast_timeout: Seconds a broadcast window stays open.
    :param port: Destination port for broadcasts.
    :param broadcast_address: Destination address for broadcasts.
    """

    def __init__(
        self,
        router: Router,
        *,
        default_timeout: float = 3.0,
        broadcast_timeout: float = 1.0,
        port: int = DEFAULT_PORT,
        broadcast_address: str = BROADCAST_ADDRESS,
    ) -> None:
        self._router = router
        self._default_timeout = default_timeout
        self._broadcast_timeout = broadcast_timeout
        self._port = port
        self._broadcast_address = broadcast_address
        self._pending: set[_PendingOperation] = set()
        self._closed = False

    @property
    def router(self) -> Router:
        return self._router

    @property
    def closed(self) -> bool:
        return self._closed

    def active_requests(self) -> list[_PendingOperation]:
        """Return all operations still waiting for replies."""
        return list(self._pending)

    def close(self) -> None:
        """Cancel every pending operation and refuse further use."""
        if self._closed:
            return
        self._closed = True
        for op in list(self._pending):
            op.cancel()

    # --- Broadcast ---

    def start_broadcast(
        self,
        command: Command,
        *,
        timeout: float | None = None,
        expected_count: int | None = None,
    ) -> PendingBroadcast:
        """Broadcast *command* and open a reply-collection window.

        Must be called from a running event loop.

        :param command: Command to broadcast.
        :param timeout: Window length in seconds.
        :param expected_count: When set, close the window early once
            this many replies have arrived.
        """
        self._check_open()
        timeout = self._resolve_timeout(timeout, self._broadcast_timeout)
        loop = asyncio.get_running_loop()
        source = self._router.next_source()
        op = PendingBroadcast(
            self._router,
            source,
            loop.create_future(),
            self._pending.discard,
            timeout=timeout,
            expected_count=expected_count,
        )
        data = encode(
            True,
            source,
            NO_TARGET,
            False,
            False,
            BROADCAST_SEQUENCE,
            command.type,
            command.payload,
        )
        logger.debug("broadcast type=%d source=%d timeout=%g", command.type, source, timeout)
        self._dispatch(op, data, self._broadcast_address, self._port, timeout)
        return op

    async def broadcast(
        self,
        command: Command,
        *,
        timeout: float | None = None,
        expected_count: int | None = None,
    ) -> list[Message]:
        """Broadcast *command* and return every reply received in the window."""
        return await self.start_broadcast(command, timeout=timeout, expected_count=expected_count)

    # --- Unicast ---

    def request(
        self,
        command: Command,
        device: Device,
        *,
        timeout: float | None = None,
        response_mode: ResponseMode | None = None,
    ) -> PendingRequest:
        """Send *command* to *device* and return the pending request.

        Advances ``device.sequence`` and uses the new value.  For
        fire-and-forget commands the request resolves to ``None`` as
        soon as the datagram has been handed to the router.

        Must be called from a running event loop.
        """
        self._check_open()
        timeout = self._resolve_timeout(timeout, self._default_timeout)
        mode = response_mode if response_mode is not None else command.response_mode
        loop = asyncio.get_running_loop()
        source = self._router.next_source()
        device.sequence = (device.sequence + 1) & 0xFF
        op = PendingRequest(
            self._router,
            source,
            loop.create_future(),
            self._pending.discard,
            sequence=device.sequence,
            response_mode=mode,
            timeout=timeout,
            serial_number=device.serial_number or None,
        )
        data = encode(
            False,
            source,
            device.target,
            mode is ResponseMode.RESPONSE,
            mode is ResponseMode.ACK_ONLY,
            device.sequence,
            command.type,
            command.payload,
        )
        logger.debug(
            "unicast type=%d source=%d sequence=%d to %s:%d",
            command.type,
            source,
            device.sequence,
            device.address,
            device.port,
        )
        if mode is ResponseMode.NONE:
            try:
                self._router.send(data, device.address, device.port)
            except Exception:
                op.cancel()
                raise
            op.resolve(None)
            return op
        self._dispatch(op, data, device.address, device.port, timeout)
        return op

    async def unicast(
        self,
        command: Command,
        device: Device,
        *,
        timeout: float | None = None,
        retries: int = 0,
        response_mode: ResponseMode | None = None,
    ) -> Message | None:
        """Send *command* to *device* and await the reply message.

        :param retries: Number of fresh requests issued after a timeout
            before the timeout is raised.  No retry by default.
        :returns: The reply (or acknowledgement) message, ``None`` for
            fire-and-forget commands.
        :raises LifxTimeoutError: If no reply arrived in time.
        :raises UnhandledCommandError: If the device does not support
            the command.
        """
        attempt = 0
        while True:
            try:
                return await self.request(
                    command, device, timeout=timeout, response_mode=response_mode
                )
            except LifxTimeoutError:
                if attempt >= retries:
                    raise
                attempt += 1
                logger.debug(
                    "Retrying type=%d to %s (attempt %d/%d)",
                    command.type,
                    device.serial_number or device.address,
                    attempt,
                    retries,
                )

    async def send(
        self,
        command: Command,
        device: Device,
        *,
        timeout: float | None = None,
        retries: int = 0,
    ) -> Any:
        """Send *command*, asking for a state reply, and return it decoded.

        Set commands are acknowledged by default; here the device is asked
        for its resulting state instead.  Use
        :meth:`send_only_acknowledgement` to wait for the acknowledgement.

        :returns: ``command.decode`` applied to the reply payload, the
            reply message when the command has no decoder, or ``None``
            for fire-and-forget commands.
        """
        mode = (
            ResponseMode.NONE
            if command.response_mode is ResponseMode.NONE
            else ResponseMode.RESPONSE
        )
        message = await self.unicast(
            command, device, timeout=timeout, retries=retries, response_mode=mode
        )
        if message is None:
            return None
        if command.decode is None:
            return message
        return command.decode(message.payload, Cursor())

    async def send_only_acknowledgement(
        self,
        command: Command,
        device: Device,
        *,
        timeout: float | None = None,
        retries: int = 0,
    ) -> None:
        """Send *command* asking only for an acknowledgement."""
        await self.unicast(
            command,
            device,
            timeout=timeout,
            retries=retries,
            response_mode=ResponseMode.ACK_ONLY,
        )

    # --- Internals ---

    def _check_open(self) -> None:
        if self._closed:
            raise DisposedClientError

    @staticmethod
    def _resolve_timeout(timeout: float | None, default: float) -> float:
        if timeout is None:
            timeout = default
        if timeout <= 0:
            raise ValidationError("timeout", timeout, "must be positive")
        return timeout

    def _dispatch(
        self,
        op: PendingRequest | PendingBroadcast,
        data: bytes,
        address: str,
        port: int,
        timeout: float,
    ) -> None:
        # Registered before sending: a reply may be delivered synchronously.
        self._router.register(op.source, op)
        self._pending.add(op)
        op.arm(timeout)
        try:
            self._router.send(data, address, port)
        except Exception as exc:
            op.reject(RequestState.FAILED, exc)
            if op.state is RequestState.FAILED:
                # Retrieved so the failed future does not warn when dropped.
                op.future.exception()
            raise
