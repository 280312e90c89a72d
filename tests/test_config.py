"""Tests for SupervisorConfig."""

from __future__ import annotations

import pytest

from oro_socket.config import DEFAULT_POLL_INTERVAL, SupervisorConfig
from oro_socket.errors import ConfigurationError


class TestSupervisorConfig:
    def test_defaults(self) -> None:
        config = SupervisorConfig(address="ws://localhost:8080")
        assert config.on_message is None
        assert config.debug is False
        assert config.interval == DEFAULT_POLL_INTERVAL == 2.0

    @pytest.mark.parametrize("address", ["", None])
    def test_address_required(self, address) -> None:
        with pytest.raises(ConfigurationError):
            SupervisorConfig(address=address)

    def test_interval_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            SupervisorConfig(address="ws://localhost:8080", interval=0)

    def test_on_message_must_be_callable(self) -> None:
        with pytest.raises(ConfigurationError):
            SupervisorConfig(address="ws://localhost:8080", on_message="print")

    def test_from_host(self) -> None:
        config = SupervisorConfig.from_host("192.168.1.20", 8080, debug=True)
        assert config.address == "ws://192.168.1.20:8080"
        assert config.debug is True

    def test_from_host_secure(self) -> None:
        assert SupervisorConfig.from_host("example.org", 443, secure=True).address == "wss://example.org:443"

    @pytest.mark.parametrize("port", [0, 70000])
    def test_from_host_rejects_bad_port(self, port: int) -> None:
        with pytest.raises(ConfigurationError):
            SupervisorConfig.from_host("localhost", port)

    def test_dict_round_trip(self) -> None:
        config = SupervisorConfig(address="ws://localhost:1", debug=True, interval=0.5)
        restored = SupervisorConfig.from_dict(config.to_dict())
        assert restored == config

    def test_from_dict_requires_address(self) -> None:
        with pytest.raises(ConfigurationError):
            SupervisorConfig.from_dict({"debug": True})
