"""
Oro Socket - a resilient client-side message connection.

Keeps one logical connection alive over a transport that can drop at any
time: reconnects on a fixed interval, queues messages sent while offline
and replays them in order, and closes superseded transport handles in the
background.
"""

__version__ = "0.1.0"

from oro_socket.config import DEFAULT_POLL_INTERVAL, SupervisorConfig
from oro_socket.errors import (
    ConfigurationError,
    SocketError,
    TransportError,
    TransportUnsupportedError,
)
from oro_socket.poller import Poller
from oro_socket.supervisor import (
    ConnectionState,
    ConnectionSupervisor,
    OutboundQueue,
    RetirementList,
    SupervisorEvent,
    SupervisorEventKind,
    SupervisorStats,
    create_supervisor,
)
from oro_socket.transport import ReadyState, TransportFactory, TransportHandle
from oro_socket.websocket import WebSocketHandle, WebSocketTransport

__all__ = [
    "__version__",
    # Config
    "DEFAULT_POLL_INTERVAL",
    "SupervisorConfig",
    # Errors
    "SocketError",
    "TransportUnsupportedError",
    "TransportError",
    "ConfigurationError",
    # Polling
    "Poller",
    # Transport
    "ReadyState",
    "TransportHandle",
    "TransportFactory",
    "WebSocketHandle",
    "WebSocketTransport",
    # Supervisor
    "ConnectionSupervisor",
    "create_supervisor",
    "ConnectionState",
    "OutboundQueue",
    "RetirementList",
    "SupervisorEvent",
    "SupervisorEventKind",
    "SupervisorStats",
]
