"""
Listening address for c_tcp_core.

A Port names a (host, port) pair and owns the handle used to listen
on it. Nothing touches the network until a client is waited for.
"""

import logging
from typing import Any, Optional

from typing_extensions import Self

from .config import SocketConfig
from .network.handle import PortSpec, SocketHandle
from .network.subsystem import NetworkSubsystem

logger = logging.getLogger(__name__)


class Port:
    """
    A bind/connect address plus its listening handle.

    Ports cannot be copied. Closing a Port closes its listening handle
    only; endpoints already accepted through it stay open.
    """

    def __init__(
        self,
        host: str,
        port: PortSpec,
        config: Optional[SocketConfig] = None,
        subsystem: Optional[NetworkSubsystem] = None,
    ) -> None:
        """
        Initialize a Port. No network calls are made.

        Args:
            host: Hostname or IPv4 address
            port: Port number or service name
            config: Socket configuration shared by sockets using this Port
            subsystem: Networking subsystem (default: the process-wide one)
        """
        self._host = host
        self._port = port
        self._listener = SocketHandle(config, subsystem)

    def __copy__(self) -> "Port":
        raise TypeError("Port cannot be copied")

    def __deepcopy__(self, memo: Any) -> "Port":
        raise TypeError("Port cannot be copied")

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Port({self._host!r}, {self._port!r})"

    @property
    def ip_address(self) -> str:
        """The host this Port was created with."""
        return self._host

    @property
    def port_number(self) -> PortSpec:
        """The port this Port was created with."""
        return self._port

    @property
    def config(self) -> SocketConfig:
        return self._listener.config

    @property
    def subsystem(self) -> NetworkSubsystem:
        return self._listener.subsystem

    @property
    def is_listening(self) -> bool:
        return self._listener.is_listening

    @property
    def is_closed(self) -> bool:
        return self._listener.is_closed

    def get_extra_info(self, name: str) -> Optional[Any]:
        """Get extra information about the listening handle."""
        return self._listener.get_extra_info(name)

    def _wait_for_client(self) -> SocketHandle:
        """
        Bind, listen and block until one client connects.

        Only meant to be called by Socket.listen_on().

        Returns:
            The accepted client handle
        """
        self._listener.listen_and_bind(self._host, self._port)
        logger.debug(f"Waiting for client on {self._host}:{self._port}")
        return self._listener.accept_one()

    def close(self) -> None:
        """Close the listening handle."""
        self._listener.close()
