"""
Lifecycle events and counters for monitoring a supervisor.

The supervisor never raises on reconnect or disposal failures. Callers
that want to watch retries subscribe an ``on_event`` hook instead.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ConnectionState(StrEnum):
    """Connection state derived from the current handle's readiness."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


class SupervisorEventKind(StrEnum):
    """Kinds of lifecycle events reported to ``on_event``."""

    CONNECT_ATTEMPT = "connect_attempt"
    CONNECT_FAILED = "connect_failed"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    MESSAGE_QUEUED = "message_queued"
    QUEUE_DRAINED = "queue_drained"
    HANDLE_RETIRED = "handle_retired"
    RETIRED_DISPOSED = "retired_disposed"
    CLOSE_FAILED = "close_failed"


@dataclass
class SupervisorEvent:
    """A single lifecycle event."""

    kind: SupervisorEventKind
    address: str
    attempt: int = 0
    count: int = 0
    error: BaseException | None = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "address": self.address,
            "attempt": self.attempt,
            "count": self.count,
            "error": repr(self.error) if self.error is not None else None,
            "timestamp": self.timestamp,
        }


@dataclass
class SupervisorStats:
    """Running counters for one supervisor."""

    connect_attempts: int = 0
    connect_failures: int = 0
    connections: int = 0
    disconnects: int = 0
    messages_sent: int = 0
    messages_queued: int = 0
    handles_closed: int = 0
    close_failures: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "connect_attempts": self.connect_attempts,
            "connect_failures": self.connect_failures,
            "connections": self.connections,
            "disconnects": self.disconnects,
            "messages_sent": self.messages_sent,
            "messages_queued": self.messages_queued,
            "handles_closed": self.handles_closed,
            "close_failures": self.close_failures,
        }
