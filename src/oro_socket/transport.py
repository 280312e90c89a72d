"""
Transport capability required by the connection supervisor.

The supervisor never talks to a socket library directly. It is handed a
factory that turns an address into a handle, and it samples the
handle's ``ready_state`` to learn whether the connection is usable.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import IntEnum
from typing import Any, Protocol, runtime_checkable


class ReadyState(IntEnum):
    """Readiness of a transport handle (WebSocket numbering)."""

    CONNECTING = 0
    OPEN = 1
    CLOSING = 2
    CLOSED = 3


def noop(*args: Any) -> None:
    """Callback placeholder for detached handles."""


@runtime_checkable
class TransportHandle(Protocol):
    """One attempt to connect to a fixed address.

    ``send`` must raise :class:`~oro_socket.errors.TransportError` when
    the handle is not open. ``on_open`` is optional for implementations
    that cannot report readiness natively; the supervisor falls back to
    polling ``ready_state``.
    """

    on_data: Callable[[Any], None]
    on_close: Callable[[], None]

    @property
    def ready_state(self) -> ReadyState: ...

    def send(self, message: Any) -> None: ...

    def close(self) -> None: ...


TransportFactory = Callable[[str], TransportHandle]
