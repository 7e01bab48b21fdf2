"""
c_tcp_core - Minimal blocking TCP endpoints

A small connection primitive for client/server programs: wait on a
Port for one client, or connect to a Port, then exchange raw bytes.
Socket lifetimes and resolved addresses are managed for the caller.
"""

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

from .byteorder import (
    host_to_network_long,
    host_to_network_short,
    network_to_host_long,
    network_to_host_short,
)
from .config import SocketConfig
from .endpoint import Socket
from .exceptions import (
    TCPCoreError,
    SubsystemInitError,
    AddressResolutionError,
    SocketCreationError,
    SocketOptionError,
    BindError,
    ListenError,
    AcceptError,
    ConnectionError,
    InvalidHandleError,
    SendError,
    ReceiveError,
)
from .port import Port

__all__ = [
    "Port",
    "Socket",
    "SocketConfig",
    "host_to_network_short",
    "host_to_network_long",
    "network_to_host_short",
    "network_to_host_long",
    "TCPCoreError",
    "SubsystemInitError",
    "AddressResolutionError",
    "SocketCreationError",
    "SocketOptionError",
    "BindError",
    "ListenError",
    "AcceptError",
    "ConnectionError",
    "InvalidHandleError",
    "SendError",
    "ReceiveError",
]
