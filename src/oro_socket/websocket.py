"""
WebSocket transport built on aiohttp.

Each :class:`WebSocketHandle` owns one background task that connects,
pumps outbound frames in submission order, dispatches inbound TEXT and
BINARY frames to ``on_data`` and fires ``on_close`` exactly once when
the connection ends, whether it failed to open, was closed by the peer
or was closed locally.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from .errors import TransportError
from .transport import ReadyState, noop

logger = logging.getLogger(__name__)

#: Seconds allowed for the opening handshake.
DEFAULT_CONNECT_TIMEOUT = 10.0

#: Seconds allowed for flushing accepted frames on close.
DEFAULT_FLUSH_TIMEOUT = 5.0

_STOP = object()


class WebSocketHandle:
    """A single aiohttp WebSocket connection attempt.

    Frames accepted by :meth:`send` are written in order by a writer task.
    A local :meth:`close` lets the writer flush every accepted frame
    before the socket is closed. When the peer closes first, or a write
    fails, frames still waiting in the outbox cannot be delivered and are
    dropped; callers that need delivery guarantees must acknowledge at
    the application level.
    """

    def __init__(
        self,
        address: str,
        *,
        session: aiohttp.ClientSession | None = None,
        heartbeat: float | None = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self.address = address
        self.on_open: Callable[[], None] = noop
        self.on_data: Callable[[Any], None] = noop
        self.on_close: Callable[[], None] = noop

        self._state = ReadyState.CONNECTING
        self._session = session
        self._owns_session = session is None
        self._heartbeat = heartbeat
        self._connect_timeout = connect_timeout
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._outbox: asyncio.Queue[Any] = asyncio.Queue()
        self._finished = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        # Covers a task cancelled before it ever ran.
        self._task.add_done_callback(lambda _task: self._finish())

    @property
    def ready_state(self) -> ReadyState:
        return self._state

    @property
    def done(self) -> bool:
        """True once the connection task has finished."""
        return self._task.done()

    def send(self, message: Any) -> None:
        if self._state != ReadyState.OPEN:
            raise TransportError(f"WebSocket to {self.address} is not open ({self._state.name})")
        self._outbox.put_nowait(message)

    def close(self) -> None:
        if self._task.done() or self._state in (ReadyState.CLOSING, ReadyState.CLOSED):
            return
        self._state = ReadyState.CLOSING
        self._task.cancel()

    async def _run(self) -> None:
        session = self._session
        if session is None:
            session = aiohttp.ClientSession()
        try:
            try:
                self._ws = await asyncio.wait_for(
                    session.ws_connect(self.address, heartbeat=self._heartbeat),
                    self._connect_timeout,
                )
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
                logger.debug("WebSocket connect to %s failed: %s", self.address, e)
                return

            self._state = ReadyState.OPEN
            logger.debug("WebSocket connected to %s", self.address)
            self.on_open()

            writer = asyncio.create_task(self._write_loop(self._ws))
            try:
                await self._read_loop(self._ws)
            finally:
                await self._stop_writer(writer)
        finally:
            self._state = ReadyState.CLOSED
            if self._ws is not None and not self._ws.closed:
                await self._ws.close()
            if self._owns_session:
                await session.close()
            self._finish()

    def _finish(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._state = ReadyState.CLOSED
        self.on_close()

    async def _stop_writer(self, writer: asyncio.Task[None]) -> None:
        self._state = ReadyState.CLOSING
        self._outbox.put_nowait(_STOP)
        try:
            await asyncio.wait_for(writer, DEFAULT_FLUSH_TIMEOUT)
        except asyncio.TimeoutError:
            logger.debug("WebSocket %s dropped %d unflushed frames", self.address, self._outbox.qsize())

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        async for msg in ws:
            if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                try:
                    self.on_data(msg.data)
                except Exception:
                    logger.exception("Data handler failed for %s", self.address)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.debug("WebSocket %s error: %s", self.address, ws.exception())
                break

    async def _write_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        while True:
            message = await self._outbox.get()
            if message is _STOP:
                return
            try:
                if isinstance(message, (bytes, bytearray)):
                    await ws.send_bytes(bytes(message))
                else:
                    await ws.send_str(str(message))
            except (aiohttp.ClientError, ConnectionError) as e:
                logger.debug(
                    "WebSocket %s write failed, dropping %d queued frames: %s",
                    self.address,
                    self._outbox.qsize(),
                    e,
                )
                await ws.close()
                return


class WebSocketTransport:
    """Transport factory producing :class:`WebSocketHandle` instances.

    Pass a shared ``session`` to reuse one connection pool across
    reconnects; otherwise each handle opens and closes its own session.
    """

    def __init__(
        self,
        *,
        session: aiohttp.ClientSession | None = None,
        heartbeat: float | None = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self._session = session
        self._heartbeat = heartbeat
        self._connect_timeout = connect_timeout

    def __call__(self, address: str) -> WebSocketHandle:
        return WebSocketHandle(
            address,
            session=self._session,
            heartbeat=self._heartbeat,
            connect_timeout=self._connect_timeout,
        )
