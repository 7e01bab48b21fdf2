"""
Low-level networking components for c_tcp_core.

This module provides the socket handle state machine and the
process-wide networking subsystem lifecycle it depends on.
"""

from .handle import AddressInfo, HandleRole, PortSpec, SocketHandle, validate_port
from .subsystem import NetworkSubsystem, get_default_subsystem

__all__ = [
    "AddressInfo",
    "HandleRole",
    "PortSpec",
    "SocketHandle",
    "validate_port",
    "NetworkSubsystem",
    "get_default_subsystem",
]
