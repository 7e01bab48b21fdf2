"""
Connected endpoint for c_tcp_core.

Socket is the public wrapper around a connected handle. It can only be
obtained from Socket.listen_on() or Socket.connect_to().
"""

import logging
from typing import Any, Optional

from typing_extensions import Self

from .config import SocketConfig
from .network.handle import HandleRole, SocketHandle
from .port import Port

logger = logging.getLogger(__name__)

_FACTORY_TOKEN = object()


class Socket:
    """
    A connected, blocking TCP endpoint.

    Sockets cannot be copied. Closing one (explicitly, through ``with``
    or by dropping the last reference) releases its connection.
    """

    def __init__(self, handle: SocketHandle, _token: object = None) -> None:
        if _token is not _FACTORY_TOKEN:
            raise TypeError(
                "Socket instances are created with Socket.listen_on() or Socket.connect_to()"
            )
        self._handle = handle.transfer()

    @classmethod
    def listen_on(cls, port: Port) -> "Socket":
        """
        Wait on a Port for one client to connect.

        Blocks until a client connects.

        Args:
            port: The Port to bind and listen on

        Returns:
            The endpoint connected to the client

        Raises:
            AddressResolutionError, SocketCreationError, SocketOptionError,
            BindError, ListenError, AcceptError: If listening fails
        """
        handle = port._wait_for_client()
        logger.debug(f"Client connected on {port!r}")
        return cls(handle, _FACTORY_TOKEN)

    @classmethod
    def connect_to(cls, port: Port, config: Optional[SocketConfig] = None) -> "Socket":
        """
        Connect to the address named by a Port.

        Blocks until the connection succeeds or fails.

        Args:
            port: The Port naming the remote address
            config: Socket configuration (default: the Port's)

        Returns:
            The connected endpoint

        Raises:
            AddressResolutionError, SocketCreationError, SocketOptionError,
            ConnectionError: If the connection cannot be established
        """
        handle = SocketHandle(config if config is not None else port.config, port.subsystem)
        handle.connect(port.ip_address, port.port_number)
        return cls(handle, _FACTORY_TOKEN)

    def __copy__(self) -> "Socket":
        raise TypeError("Socket cannot be copied")

    def __deepcopy__(self, memo: Any) -> "Socket":
        raise TypeError("Socket cannot be copied")

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Socket role={self._handle.role.value} peer={self.get_extra_info('peername')}>"

    @property
    def role(self) -> HandleRole:
        return self._handle.role

    @property
    def is_closed(self) -> bool:
        return self._handle.is_closed

    def send(self, data: bytes) -> int:
        """Send data with one blocking call; returns the number of bytes sent."""
        return self._handle.send(data)

    def receive(self) -> bytes:
        """Receive up to the configured buffer size; empty on peer close."""
        return self._handle.receive()

    def has_data_waiting(self) -> bool:
        """Check without blocking whether data can be received."""
        return self._handle.has_data_waiting()

    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._handle.get_extra_info(name)

    def close(self) -> None:
        """Close the connection."""
        self._handle.close()
