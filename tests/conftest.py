"""
Shared fakes for supervisor and poller tests.

FakeTransport stands in for a transport factory: it can refuse a number of
connection attempts, hand out handles in a chosen initial state, and make
handles drop after a number of sends.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import Any

import pytest

from oro_socket.config import SupervisorConfig
from oro_socket.errors import TransportError
from oro_socket.supervisor import ConnectionSupervisor
from oro_socket.transport import ReadyState, noop

#: Poll interval used throughout the tests, in seconds.
TICK = 0.01


class FakeHandle:
    """In-memory transport handle."""

    def __init__(self, address: str, state: ReadyState = ReadyState.OPEN) -> None:
        self.address = address
        self.ready_state = state
        self.on_open: Callable[[], None] = noop
        self.on_data: Callable[[Any], None] = noop
        self.on_close: Callable[[], None] = noop
        self.sent: list[Any] = []
        self.close_calls = 0
        self.fail_close = False
        self.fail_send = False
        self.drop_after: int | None = None
        self.send_errors = 0

    def send(self, message: Any) -> None:
        if self.send_errors > 0:
            self.send_errors -= 1
            raise RuntimeError("transport broke")
        if self.ready_state != ReadyState.OPEN or self.fail_send:
            raise TransportError("fake handle is not open")
        self.sent.append(message)
        if self.drop_after is not None and len(self.sent) >= self.drop_after:
            asyncio.get_running_loop().call_soon(self.drop)

    def close(self) -> None:
        self.close_calls += 1
        if self.fail_close:
            raise OSError("close failed")
        self.ready_state = ReadyState.CLOSED

    def open(self) -> None:
        self.ready_state = ReadyState.OPEN
        self.on_open()

    def drop(self) -> None:
        """Simulate the peer closing the connection."""
        self.ready_state = ReadyState.CLOSED
        self.on_close()

    def receive(self, payload: Any) -> None:
        self.on_data(payload)


class FakeTransport:
    """Transport factory producing FakeHandle instances."""

    def __init__(self, *, failures: int = 0, state: ReadyState = ReadyState.OPEN) -> None:
        self.failures = failures
        self.state = state
        self.drop_after: int | None = None
        self.send_errors = 0
        self.calls = 0
        self.handles: list[FakeHandle] = []

    def __call__(self, address: str) -> FakeHandle:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise ConnectionRefusedError(f"refused: {address}")
        handle = FakeHandle(address, self.state)
        handle.drop_after = self.drop_after
        handle.send_errors = self.send_errors
        self.handles.append(handle)
        return handle

    @property
    def last(self) -> FakeHandle:
        return self.handles[-1]


async def wait_for_condition(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(TICK / 4)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def transport():
    """A transport that connects on the first attempt."""
    return FakeTransport()


@pytest.fixture
def wait_for():
    return wait_for_condition


@pytest.fixture
def make_supervisor():
    """Factory for supervisors; call it from inside an async test."""

    def _make(transport: FakeTransport, **options: Any) -> ConnectionSupervisor:
        on_event = options.pop("on_event", None)
        log = options.pop("log", None)
        options.setdefault("interval", TICK)
        config = SupervisorConfig(address="ws://127.0.0.1:9000", **options)
        return ConnectionSupervisor(config, transport=transport, on_event=on_event, log=log)

    return _make


@pytest.fixture
def make_transport():
    """The FakeTransport class, for tests that need custom failure modes."""
    return FakeTransport
