"""
Connection supervisor: one logical connection over a transport that may drop.

The supervisor owns a single "current" transport handle. When that handle
is missing or closes, it retires the handle, creates a new one and polls
until the new one reports OPEN. Messages sent in the meantime wait in an
outbound queue and are replayed in order, one per tick, after the
connection comes back. Retired handles are closed in the background, also
one per tick.

Nothing raised by the transport escapes :meth:`ConnectionSupervisor.send`
or the reconnect path. Failures are logged, counted in
:class:`SupervisorStats` and reported to the optional ``on_event`` hook.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from typing import Any

from ..config import DEFAULT_POLL_INTERVAL, SupervisorConfig
from ..errors import TransportUnsupportedError
from ..poller import Poller
from ..transport import ReadyState, TransportFactory, TransportHandle, noop
from ..websocket import WebSocketTransport
from .events import ConnectionState, SupervisorEvent, SupervisorEventKind, SupervisorStats
from .queue import OutboundQueue
from .retirement import RetirementList

logger = logging.getLogger(__name__)


class ConnectionSupervisor:
    """Keeps a transport connected and buffers traffic across drops.

    Usage::

        async def main():
            supervisor = ConnectionSupervisor(
                SupervisorConfig(address="ws://10.0.0.5:8080", on_message=print),
            )
            supervisor.send("hello")  # True if sent now, False if queued

    Must be constructed inside a running event loop.
    """

    def __init__(
        self,
        config: SupervisorConfig,
        *,
        transport: TransportFactory | None = None,
        log: logging.Logger | None = None,
        on_event: Callable[[SupervisorEvent], None] | None = None,
    ) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError as e:
            raise TransportUnsupportedError("ConnectionSupervisor requires a running asyncio event loop") from e

        if transport is None:
            transport = WebSocketTransport()
        if not callable(transport):
            raise TransportUnsupportedError(f"Transport factory is not callable: {transport!r}")

        self._config = config
        self._transport = transport
        self._logger = log if log is not None else logger
        self._on_message = config.on_message or self._log_response
        self._on_event = on_event

        self._poller = Poller(config.interval)
        self._queue = OutboundQueue()
        self._retired = RetirementList()
        self._stats = SupervisorStats()
        self._current: TransportHandle | None = None
        self._opened = asyncio.Event()

        self._reconnecting = False
        self._draining = False
        self._disposing = False

        self.ensure_connection()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def address(self) -> str:
        return self._config.address

    @property
    def config(self) -> SupervisorConfig:
        return self._config

    @property
    def debug(self) -> bool:
        return self._config.debug

    @property
    def current(self) -> TransportHandle | None:
        """The live or still-connecting handle, if any."""
        return self._current

    @property
    def state(self) -> ConnectionState:
        handle = self._current
        if handle is None:
            return ConnectionState.DISCONNECTED
        ready_state = handle.ready_state
        if ready_state == ReadyState.OPEN:
            return ConnectionState.OPEN
        if ready_state == ReadyState.CONNECTING:
            return ConnectionState.CONNECTING
        return ConnectionState.DISCONNECTED

    @property
    def is_connected(self) -> bool:
        return self._current is not None and self._current.ready_state == ReadyState.OPEN

    @property
    def queued(self) -> tuple[Any, ...]:
        """Messages waiting for the connection, oldest first."""
        return tuple(self._queue)

    @property
    def retired(self) -> tuple[TransportHandle, ...]:
        """Superseded handles not yet disposed."""
        return tuple(self._retired)

    @property
    def stats(self) -> SupervisorStats:
        return self._stats

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def send(self, message: Any) -> bool:
        """Send ``message`` now if the connection is open, else queue it.

        Returns:
            True if the message was handed to the transport, False if it
            was queued for delivery after the next reconnect.
        """
        handle = self._current
        if handle is not None and handle.ready_state == ReadyState.OPEN:
            try:
                handle.send(message)
            except Exception as e:
                self._log("Send to %s failed: %s", self.address, e)
            else:
                self._stats.messages_sent += 1
                self._log('Message "%s" sent!', message)
                return True

        self._log('Socket cannot send messages! Placing message "%s" in queue.', message)
        self._queue.append(message)
        self._stats.messages_queued += 1
        self._emit(SupervisorEventKind.MESSAGE_QUEUED, count=len(self._queue))
        return False

    def multisend(
        self,
        messages: Iterable[Any],
        on_complete: Callable[[], Any] | None = None,
    ) -> asyncio.Task[None]:
        """Send ``messages`` one per poll tick, then call ``on_complete``."""
        return self._poller.over(messages, self.send, on_complete)

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------

    def ensure_connection(self) -> None:
        """Replace the current handle and poll until a new one is open.

        Each tick retires the handle that has not opened yet and tries a
        fresh one. There is no retry limit and no backoff.
        """
        if self._reconnecting:
            return
        self._reconnecting = True

        if self._current is not None:
            self._log("Socket connection was interrupted. Attempting to reconnect...")
        self._replace_current()
        self._poller.until(
            self._reattempt,
            lambda: self.is_connected,
            self._on_connected,
            wake=self._opened,
        )

    def bind_events(self) -> None:
        handle = self._current
        if handle is None:
            return
        self._log("Binding events...")
        handle.on_data = self._handle_data
        handle.on_close = lambda: self._handle_close(handle)

    def unbind_events(self) -> None:
        handle = self._current
        if handle is None:
            return
        self._log("Unbinding events...")
        handle.on_data = noop
        handle.on_close = noop
        if hasattr(handle, "on_open"):
            handle.on_open = noop

    def resend_queued_messages(self) -> None:
        """Replay the queued messages through :meth:`send`.

        Only the messages queued when the replay starts are removed when
        it ends. A message that lands back in the queue because the
        connection dropped mid-replay stays queued.
        """
        if self._queue.is_empty or self._draining:
            return
        batch = self._queue.snapshot()
        self._draining = True
        self._log("Resending %d queued messages...", len(batch))

        def drained() -> None:
            self._queue.discard(len(batch))
            self._draining = False
            self._log("Queued messages re-sent!")
            self._emit(SupervisorEventKind.QUEUE_DRAINED, count=len(batch))
            if self.is_connected:
                self.resend_queued_messages()

        self.multisend(batch, drained)

    def dispose_retired(self) -> None:
        """Close every retired handle, one per tick, ignoring failures."""
        if not len(self._retired) or self._disposing:
            return
        batch = self._retired.snapshot()
        self._disposing = True
        self._log("Disposing %d old sockets...", len(batch))

        def disposed() -> None:
            self._retired.discard(len(batch))
            self._disposing = False
            self._log("Old sockets disposed!")
            self._emit(SupervisorEventKind.RETIRED_DISPOSED, count=len(batch))
            if len(self._retired) and self.is_connected:
                self.dispose_retired()

        self._poller.over(batch, self._close_retired, disposed)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _reattempt(self) -> None:
        self._log("Socket to %s is not open yet. Retrying...", self.address)
        self._replace_current()

    def _replace_current(self) -> None:
        handle = self._current
        if handle is not None:
            self.unbind_events()
            self._current = None
            self._retired.retire(handle)
            self._emit(SupervisorEventKind.HANDLE_RETIRED, count=len(self._retired))
        self._current = self._create_handle()

    def _create_handle(self) -> TransportHandle | None:
        self._stats.connect_attempts += 1
        attempt = self._stats.connect_attempts
        self._emit(SupervisorEventKind.CONNECT_ATTEMPT, attempt=attempt)
        try:
            handle = self._transport(self.address)
        except Exception as e:
            self._stats.connect_failures += 1
            self._log("Connection attempt %d to %s failed: %s", attempt, self.address, e)
            self._emit(SupervisorEventKind.CONNECT_FAILED, attempt=attempt, error=e)
            return None

        if hasattr(handle, "on_open"):
            handle.on_open = self._opened.set
        return handle

    def _on_connected(self) -> None:
        self._reconnecting = False
        self._stats.connections += 1
        self._log("Socket has successfully connected to %s!", self.address)
        self._emit(SupervisorEventKind.CONNECTED, attempt=self._stats.connect_attempts)
        self.bind_events()
        self.resend_queued_messages()
        self.dispose_retired()

    def _handle_close(self, handle: TransportHandle) -> None:
        if handle is not self._current:
            return
        self._stats.disconnects += 1
        self._emit(SupervisorEventKind.DISCONNECTED)
        self.ensure_connection()

    def _handle_data(self, payload: Any) -> None:
        try:
            self._on_message(payload)
        except Exception:
            self._logger.exception("Message handler failed for %s", self.address)

    def _close_retired(self, handle: TransportHandle) -> None:
        try:
            handle.close()
        except Exception as e:
            self._stats.close_failures += 1
            self._log("Failed to close retired socket: %s", e)
            self._emit(SupervisorEventKind.CLOSE_FAILED, error=e)
        else:
            self._stats.handles_closed += 1

    def _log_response(self, payload: Any) -> None:
        self._log('Received response: "%s"', payload)

    def _log(self, message: str, *args: Any) -> None:
        level = logging.INFO if self._config.debug else logging.DEBUG
        self._logger.log(level, message, *args)

    def _emit(self, kind: SupervisorEventKind, **fields: Any) -> None:
        if self._on_event is None:
            return
        event = SupervisorEvent(kind=kind, address=self.address, **fields)
        try:
            self._on_event(event)
        except Exception:
            self._logger.exception("Event hook failed for %s", kind.value)


def create_supervisor(
    address: str | None = None,
    *,
    host: str | None = None,
    port: int | None = None,
    on_message: Callable[[Any], None] | None = None,
    debug: bool = False,
    interval: float = DEFAULT_POLL_INTERVAL,
    transport: TransportFactory | None = None,
    log: logging.Logger | None = None,
    on_event: Callable[[SupervisorEvent], None] | None = None,
) -> ConnectionSupervisor:
    """Build a supervisor from an address or a ``host``/``port`` pair.

    Example:
        supervisor = create_supervisor(host="192.168.1.20", port=8080, debug=True)
    """
    options: dict[str, Any] = {"on_message": on_message, "debug": debug, "interval": interval}
    if address is not None:
        config = SupervisorConfig(address=address, **options)
    elif host is not None and port is not None:
        config = SupervisorConfig.from_host(host, port, **options)
    else:
        raise TypeError("create_supervisor() needs an address or both host and port")
    return ConnectionSupervisor(config, transport=transport, log=log, on_event=on_event)
