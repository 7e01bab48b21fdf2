"""
Custom exceptions for c_tcp_core.

This module defines the exception hierarchy raised by the socket
handle, the listening Port and the connected Socket endpoint.
Every error is surfaced to the caller of the failing operation;
nothing is retried or swallowed inside the library.
"""

from typing import Optional


class TCPCoreError(Exception):
    """Base exception for all c_tcp_core errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class SubsystemInitError(TCPCoreError):
    """Raised when the process-wide networking subsystem fails to start."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Subsystem init error: {message}", cause)


class AddressResolutionError(TCPCoreError):
    """Raised when a host/port pair cannot be resolved to an address."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Address resolution error: {message}", cause)


class SocketCreationError(TCPCoreError):
    """Raised when the OS cannot allocate a socket."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Socket creation error: {message}", cause)


class SocketOptionError(TCPCoreError):
    """Raised when socket options cannot be applied."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Socket option error: {message}", cause)


class BindError(TCPCoreError):
    """Raised when a socket cannot be bound to its address."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Bind error: {message}", cause)


class ListenError(TCPCoreError):
    """Raised when a bound socket cannot be put into listening mode."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Listen error: {message}", cause)


class AcceptError(TCPCoreError):
    """Raised when an incoming connection cannot be accepted."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Accept error: {message}", cause)


class ConnectionError(TCPCoreError):
    """Raised when an outgoing connection cannot be established."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class InvalidHandleError(TCPCoreError):
    """Raised when a handle is closed or not in the role an operation needs."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Invalid handle: {message}", cause)


class SendError(TCPCoreError):
    """Raised when writing to a connected socket fails."""

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        if errno is not None:
            message = f"{message} (error {errno})"
        super().__init__(f"Send error: {message}", cause)
        self.errno = errno


class ReceiveError(TCPCoreError):
    """Raised when reading from a connected socket fails."""

    def __init__(
        self,
        message: str,
        errno: Optional[int] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        if errno is not None:
            message = f"{message} (error {errno})"
        super().__init__(f"Receive error: {message}", cause)
        self.errno = errno
