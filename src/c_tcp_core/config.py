"""
Configuration for c_tcp_core sockets.

The tunables here used to be hard-coded constants: the receive buffer
size, the listen backlog and whether SO_REUSEADDR is applied.
"""

import socket
from dataclasses import dataclass


DEFAULT_RECEIVE_BUFFER_SIZE = 256
DEFAULT_BACKLOG = socket.SOMAXCONN


@dataclass(frozen=True)
class SocketConfig:
    """
    Immutable socket configuration.

    Attributes:
        receive_buffer_size: Maximum number of bytes returned by one receive()
        backlog: Listen backlog (defaults to the platform maximum)
        reuse_address: Whether SO_REUSEADDR is set on new sockets
    """

    receive_buffer_size: int = DEFAULT_RECEIVE_BUFFER_SIZE
    backlog: int = DEFAULT_BACKLOG
    reuse_address: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values after initialization."""
        if not isinstance(self.receive_buffer_size, int) or isinstance(self.receive_buffer_size, bool):
            raise ValueError("receive_buffer_size must be int")

        if self.receive_buffer_size <= 0:
            raise ValueError(
                f"receive_buffer_size must be positive, got {self.receive_buffer_size}"
            )

        if not isinstance(self.backlog, int) or isinstance(self.backlog, bool):
            raise ValueError("backlog must be int")

        if self.backlog < 0:
            raise ValueError(f"backlog must not be negative, got {self.backlog}")

        if not isinstance(self.reuse_address, bool):
            raise ValueError("reuse_address must be bool")
