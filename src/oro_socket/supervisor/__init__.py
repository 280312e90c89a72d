"""
Connection supervisor and its collaborators.

Submodules:
- client.py: ConnectionSupervisor, create_supervisor
- queue.py: OutboundQueue
- retirement.py: RetirementList
- events.py: ConnectionState, SupervisorEvent, SupervisorStats
"""

from .client import ConnectionSupervisor, create_supervisor
from .events import (
    ConnectionState,
    SupervisorEvent,
    SupervisorEventKind,
    SupervisorStats,
)
from .queue import OutboundQueue
from .retirement import RetirementList

__all__ = [
    # Main client
    "ConnectionSupervisor",
    "create_supervisor",
    # Buffers
    "OutboundQueue",
    "RetirementList",
    # Observability
    "ConnectionState",
    "SupervisorEvent",
    "SupervisorEventKind",
    "SupervisorStats",
]
