"""
Tests for SocketConfig.
"""

import socket
from dataclasses import FrozenInstanceError

import pytest

from c_tcp_core import SocketConfig


class TestSocketConfig:
    """Test SocketConfig defaults and validation."""

    def test_defaults(self) -> None:
        """Test default configuration values."""
        config = SocketConfig()
        assert config.receive_buffer_size == 256
        assert config.backlog == socket.SOMAXCONN
        assert config.reuse_address is True

    def test_immutable(self) -> None:
        """Test that configuration cannot be modified."""
        config = SocketConfig()
        with pytest.raises(FrozenInstanceError):
            config.receive_buffer_size = 5  # type: ignore[misc]

    @pytest.mark.parametrize("size", [0, -1])
    def test_invalid_buffer_size(self, size: int) -> None:
        """Test that non-positive buffer sizes are rejected."""
        with pytest.raises(ValueError, match="receive_buffer_size"):
            SocketConfig(receive_buffer_size=size)

    def test_buffer_size_type(self) -> None:
        """Test that the buffer size must be an int."""
        with pytest.raises(ValueError, match="receive_buffer_size must be int"):
            SocketConfig(receive_buffer_size="256")  # type: ignore[arg-type]

    def test_negative_backlog(self) -> None:
        """Test that negative backlogs are rejected."""
        with pytest.raises(ValueError, match="backlog"):
            SocketConfig(backlog=-1)

    def test_reuse_address_type(self) -> None:
        """Test that reuse_address must be a bool."""
        with pytest.raises(ValueError, match="reuse_address"):
            SocketConfig(reuse_address=1)  # type: ignore[arg-type]

    def test_ignores_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that configuration only comes from constructor arguments."""
        monkeypatch.setenv("C_TCP_CORE_RECEIVE_BUFFER_SIZE", "1024")
        monkeypatch.setenv("C_TCP_CORE_REUSE_ADDRESS", "off")
        assert SocketConfig() == SocketConfig(receive_buffer_size=256, reuse_address=True)
        assert not hasattr(SocketConfig, "from_env")
