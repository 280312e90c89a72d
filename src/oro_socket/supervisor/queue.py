"""
Outbound message buffer used while the transport is not open.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from typing import Any


class OutboundQueue:
    """FIFO of messages waiting for an open transport.

    Entries only leave through :meth:`discard`, which drops a prefix once
    that prefix has been replayed. Anything appended during a replay sits
    behind the prefix and survives it.
    """

    def __init__(self) -> None:
        self._messages: deque[Any] = deque()

    def append(self, message: Any) -> None:
        self._messages.append(message)

    def snapshot(self) -> list[Any]:
        """Copy of the pending messages in send order."""
        return list(self._messages)

    def discard(self, count: int) -> None:
        """Drop the ``count`` oldest messages."""
        if count < 0 or count > len(self._messages):
            raise ValueError(f"cannot discard {count} of {len(self._messages)} queued messages")
        for _ in range(count):
            self._messages.popleft()

    @property
    def is_empty(self) -> bool:
        return not self._messages

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._messages)
