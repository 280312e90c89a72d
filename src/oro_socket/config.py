"""
Configuration for the connection supervisor.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .errors import ConfigurationError

#: Fixed interval between poll ticks, in seconds.
DEFAULT_POLL_INTERVAL = 2.0


@dataclass
class SupervisorConfig:
    """Construction-time options for a ConnectionSupervisor.

    ``on_message`` receives every payload read from the transport. When
    left as None the supervisor logs the payload and discards it.
    ``debug`` raises the supervisor's lifecycle messages from DEBUG to
    INFO level.
    """

    address: str
    on_message: Callable[[Any], None] | None = None
    debug: bool = False
    interval: float = DEFAULT_POLL_INTERVAL

    def __post_init__(self) -> None:
        if not isinstance(self.address, str) or not self.address:
            raise ConfigurationError("address must be a non-empty string")
        if self.interval <= 0:
            raise ConfigurationError(f"interval must be positive, got {self.interval}")
        if self.on_message is not None and not callable(self.on_message):
            raise ConfigurationError("on_message must be callable")

    @classmethod
    def from_host(
        cls,
        host: str,
        port: int,
        *,
        secure: bool = False,
        **options: Any,
    ) -> SupervisorConfig:
        """Build a config targeting ``ws://host:port`` (``wss://`` if secure)."""
        if not host:
            raise ConfigurationError("host must be a non-empty string")
        if not 0 < int(port) < 65536:
            raise ConfigurationError(f"port out of range: {port}")
        scheme = "wss" if secure else "ws"
        return cls(address=f"{scheme}://{host}:{int(port)}", **options)

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "debug": self.debug,
            "interval": self.interval,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SupervisorConfig:
        if "address" not in data:
            raise ConfigurationError("address is required")
        return cls(
            address=data["address"],
            debug=bool(data.get("debug", False)),
            interval=float(data.get("interval", DEFAULT_POLL_INTERVAL)),
        )
