"""
Socket handle for c_tcp_core.

A SocketHandle owns at most one OS socket and, only while it is being
set up, one resolved address. It drives the
resolve -> create -> configure -> (bind + listen | connect) -> accept
sequence and makes sure everything acquired along the way is released
exactly once, on success, on failure and on close.
"""

import logging
import select
import socket
import struct
import sys
from enum import Enum
from typing import Any, NamedTuple, Optional, Tuple, Union

from typing_extensions import Self

from ..config import SocketConfig
from ..exceptions import (
    AcceptError,
    AddressResolutionError,
    BindError,
    ConnectionError,
    InvalidHandleError,
    ListenError,
    ReceiveError,
    SendError,
    SocketCreationError,
    SocketOptionError,
)
from .subsystem import NetworkSubsystem, get_default_subsystem

if sys.platform != "win32":
    import fcntl
    import termios

logger = logging.getLogger(__name__)

PortSpec = Union[str, int]

MAX_PORT = 65535


def validate_port(port: PortSpec) -> PortSpec:
    """
    Check a port before it is handed to getaddrinfo.

    Numeric ports (ints or digit strings) must be in 0..65535; zero
    asks the OS for an ephemeral port. Service names such as "http"
    are returned unchanged for the resolver to look up.

    Args:
        port: Port number or service name

    Returns:
        The port, unchanged

    Raises:
        AddressResolutionError: If the port is empty, of the wrong type
                                or out of range
    """
    if isinstance(port, bool) or not isinstance(port, (int, str)):
        raise AddressResolutionError(f"Invalid port: {port!r}")

    if isinstance(port, str):
        text = port.strip()
        if not text:
            raise AddressResolutionError("Invalid port: empty port")
        digits = text[1:] if text[0] in "+-" else text
        if not digits.isdecimal():
            return port
        number = int(text)
    else:
        number = port

    if not 0 <= number <= MAX_PORT:
        raise AddressResolutionError(
            f"Port must be between 0 and {MAX_PORT}, got {number}"
        )
    return port


class HandleRole(Enum):
    """Roles of a socket handle."""
    UNINITIALIZED = "uninitialized"  # No OS socket yet
    LISTENER = "listener"            # Bound and accepting connections
    CONNECTOR = "connector"          # Connected through connect()
    ACCEPTED = "accepted"            # Connected through accept_one()
    CLOSED = "closed"                # Released, cannot be reused


_CONNECTED_ROLES = (HandleRole.CONNECTOR, HandleRole.ACCEPTED)


class AddressInfo(NamedTuple):
    """One resolved IPv4 stream address, as returned by getaddrinfo."""
    family: int
    type: int
    proto: int
    canonname: str
    sockaddr: Tuple[str, int]


class SocketHandle:
    """
    Exclusive owner of one OS socket.

    Handles are move-only: copying raises TypeError and transfer()
    hands the socket to a new handle, leaving this one empty. A handle
    that performed initialization holds one reference on the networking
    subsystem until it is closed.
    """

    def __init__(
        self,
        config: Optional[SocketConfig] = None,
        subsystem: Optional[NetworkSubsystem] = None,
    ) -> None:
        """
        Initialize an empty handle. No network calls are made.

        Args:
            config: Socket configuration (default: SocketConfig())
            subsystem: Networking subsystem (default: the process-wide one)
        """
        self._config = config if config is not None else SocketConfig()
        self._subsystem = subsystem if subsystem is not None else get_default_subsystem()
        self._sock: Optional[socket.socket] = None
        self._address_info: Optional[AddressInfo] = None
        self._role = HandleRole.UNINITIALIZED
        self._initialized = False
        self._holds_subsystem = False
        self._listen_address: Optional[Tuple[str, str]] = None

    @classmethod
    def _from_accepted(
        cls,
        sock: socket.socket,
        config: SocketConfig,
        subsystem: NetworkSubsystem,
    ) -> "SocketHandle":
        """Wrap a socket returned by accept() in a new ACCEPTED handle."""
        handle = cls(config, subsystem)
        try:
            subsystem.acquire()
        except BaseException:
            sock.close()
            raise
        handle._holds_subsystem = True
        handle._sock = sock
        handle._role = HandleRole.ACCEPTED
        handle._initialized = True
        return handle

    def __copy__(self) -> "SocketHandle":
        raise TypeError("SocketHandle cannot be copied; use transfer()")

    def __deepcopy__(self, memo: Any) -> "SocketHandle":
        raise TypeError("SocketHandle cannot be copied; use transfer()")

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_sock", None) is not None or getattr(self, "_holds_subsystem", False):
            self.close()

    def __repr__(self) -> str:
        fileno = self._sock.fileno() if self._sock is not None else None
        return f"<SocketHandle role={self._role.value} fileno={fileno}>"

    @property
    def role(self) -> HandleRole:
        """Current role of the handle."""
        return self._role

    @property
    def config(self) -> SocketConfig:
        return self._config

    @property
    def subsystem(self) -> NetworkSubsystem:
        return self._subsystem

    @property
    def is_initialized(self) -> bool:
        """Check if the handle owns a created OS socket."""
        return self._initialized

    @property
    def is_listening(self) -> bool:
        return self._role is HandleRole.LISTENER

    @property
    def is_connected(self) -> bool:
        return self._role in _CONNECTED_ROLES

    @property
    def is_closed(self) -> bool:
        return self._role is HandleRole.CLOSED

    @property
    def holds_address_info(self) -> bool:
        """Check if a resolved address is still held."""
        return self._address_info is not None

    def resolve_and_create(self, host: str, port: PortSpec, passive: bool = False) -> None:
        """
        Resolve an address and create the OS socket for it.

        Starts the networking subsystem if needed, resolves (host, port)
        to an IPv4 stream address, creates the socket and applies the
        configured options. Whatever was acquired is released again if
        any step fails.

        Args:
            host: Hostname or IPv4 address. Empty means the wildcard
                  address when passive, the loopback address otherwise.
            port: Port number or service name
            passive: Resolve for binding rather than connecting

        Raises:
            InvalidHandleError: If the handle is closed or already initialized
            SubsystemInitError: If the networking subsystem fails to start
            AddressResolutionError: If the address cannot be resolved
            SocketCreationError: If the socket cannot be created
            SocketOptionError: If socket options cannot be applied
        """
        self._ensure_open()
        if self._initialized:
            raise InvalidHandleError(f"{self._role.value} handle is already initialized")

        if not self._holds_subsystem:
            self._subsystem.acquire()
            self._holds_subsystem = True

        try:
            address_info = self._resolve(host, port, passive)
            self._address_info = address_info
            self._sock = self._create_socket(address_info)
            self._apply_socket_options(self._sock)
        except BaseException:
            self._release_resources()
            raise

        self._initialized = True
        logger.debug(f"Socket created for {address_info.sockaddr}")

    def connect(self, host: str, port: PortSpec) -> None:
        """
        Connect to a remote address, blocking until it succeeds or fails.

        Args:
            host: Hostname or IPv4 address to connect to
            port: Port number or service name

        Raises:
            AddressResolutionError, SocketCreationError, SocketOptionError:
                If the handle cannot be initialized
            InvalidHandleError: If the handle is not usable for connecting
            ConnectionError: If the OS reports a connection failure. The
                             handle is released and may be reused.
        """
        self._ensure_open()
        if self._role is not HandleRole.UNINITIALIZED:
            raise InvalidHandleError(f"cannot connect a {self._role.value} handle")

        if not self._initialized:
            self.resolve_and_create(host, port)

        sock = self._sock
        if sock is None or sock.fileno() == -1 or self._address_info is None:
            self._release_resources()
            raise InvalidHandleError("socket is not a valid connection handle")

        try:
            sock.connect(self._address_info.sockaddr)
        except OSError as e:
            logger.error(f"Unable to connect to {host}:{port}: {e}")
            self._release_resources()
            raise ConnectionError(f"Unable to connect to {host}:{port}", cause=e) from e
        except BaseException:
            self._release_resources()
            raise

        self._address_info = None
        self._role = HandleRole.CONNECTOR
        logger.debug(f"Connected to {host}:{port}")

    def listen_and_bind(self, host: str, port: PortSpec) -> None:
        """
        Bind to a local address and start listening.

        The backlog is taken from the configuration. Calling this again
        with the address the handle is already listening on does nothing.

        Args:
            host: Local hostname or IPv4 address to bind
            port: Port number or service name

        Raises:
            AddressResolutionError, SocketCreationError, SocketOptionError:
                If the handle cannot be initialized
            InvalidHandleError: If the handle is connected, or already
                                listening on a different address
            BindError: If the address cannot be bound
            ListenError: If the socket cannot listen
        """
        self._ensure_open()
        if self._role is HandleRole.LISTENER:
            if self._listen_address != (host, str(port)):
                bound_host, bound_port = self._listen_address
                raise InvalidHandleError(
                    f"handle is listening on {bound_host}:{bound_port}, not {host}:{port}"
                )
            return
        if self._role is not HandleRole.UNINITIALIZED:
            raise InvalidHandleError(f"cannot listen on a {self._role.value} handle")

        if not self._initialized:
            self.resolve_and_create(host, port, passive=True)

        sock = self._sock
        if sock is None or sock.fileno() == -1 or self._address_info is None:
            self._release_resources()
            raise InvalidHandleError("socket is not a valid connection handle")

        try:
            sock.bind(self._address_info.sockaddr)
        except OSError as e:
            logger.error(f"Could not bind {host}:{port}: {e}")
            self._release_resources()
            raise BindError(f"Could not bind {host}:{port}", cause=e) from e
        except BaseException:
            self._release_resources()
            raise

        try:
            sock.listen(self._config.backlog)
        except OSError as e:
            logger.error(f"Listen failed on {host}:{port}: {e}")
            self._release_resources()
            raise ListenError(f"Listen failed on {host}:{port}", cause=e) from e
        except BaseException:
            self._release_resources()
            raise

        self._address_info = None
        self._listen_address = (host, str(port))
        self._role = HandleRole.LISTENER
        logger.debug(f"Listening on {host}:{port} (backlog={self._config.backlog})")

    def accept_one(self) -> "SocketHandle":
        """
        Wait for one incoming connection.

        The listening handle is left untouched and may accept again.

        Returns:
            A new handle in ACCEPTED role owning the client connection

        Raises:
            AcceptError: If the handle is not listening or accept fails
        """
        self._ensure_open()
        if self._role is not HandleRole.LISTENER or self._sock is None:
            raise AcceptError(f"{self._role.value} handle is not listening")

        try:
            client, peer = self._sock.accept()
        except OSError as e:
            logger.error(f"Accept failed: {e}")
            raise AcceptError("Accept failed", cause=e) from e

        logger.debug(f"Accepted connection from {peer}")
        return SocketHandle._from_accepted(client, self._config, self._subsystem)

    def send(self, data: bytes) -> int:
        """
        Write data with a single blocking send call.

        No retry loop is performed: the OS may accept fewer bytes than
        given, in which case the caller sends the remainder.

        Args:
            data: Bytes to send

        Returns:
            Number of bytes accepted by the OS

        Raises:
            InvalidHandleError: If the handle is not connected
            SendError: If the OS reports a failure
        """
        sock = self._require_connected()
        try:
            return sock.send(data)
        except OSError as e:
            logger.error(f"Unable to write to socket: {e}")
            raise SendError("Unable to write to socket", errno=e.errno, cause=e) from e

    def receive(self) -> bytes:
        """
        Read at most ``config.receive_buffer_size`` bytes, blocking.

        Returns:
            The bytes read; empty when the peer closed the connection

        Raises:
            InvalidHandleError: If the handle is not connected
            ReceiveError: If the OS reports a failure
        """
        sock = self._require_connected()
        try:
            return sock.recv(self._config.receive_buffer_size)
        except OSError as e:
            logger.error(f"Unable to read from socket: {e}")
            raise ReceiveError("Unable to read from socket", errno=e.errno, cause=e) from e

    def has_data_waiting(self) -> bool:
        """
        Check without blocking whether bytes are queued for reading.

        No data is consumed.

        Raises:
            InvalidHandleError: If the handle is not connected
            ReceiveError: If the pending byte count cannot be queried
        """
        sock = self._require_connected()
        try:
            return _pending_bytes(sock) != 0
        except OSError as e:
            raise ReceiveError("Unable to query pending data", errno=e.errno, cause=e) from e

    def transfer(self) -> "SocketHandle":
        """
        Move everything this handle owns into a new handle.

        This handle is left empty and uninitialized.

        Returns:
            The new owner
        """
        self._ensure_open()
        other = SocketHandle(self._config, self._subsystem)
        other._sock, self._sock = self._sock, None
        other._address_info, self._address_info = self._address_info, None
        other._role, self._role = self._role, HandleRole.UNINITIALIZED
        other._initialized, self._initialized = self._initialized, False
        other._holds_subsystem, self._holds_subsystem = self._holds_subsystem, False
        other._listen_address, self._listen_address = self._listen_address, None
        return other

    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Get extra information about the handle.

        Args:
            name: One of "socket", "peername", "sockname", "fileno", "role"

        Returns:
            The requested information or None if not available
        """
        if name == "role":
            return self._role.value
        if self._sock is None:
            return None
        if name == "socket":
            return self._sock
        elif name == "peername":
            try:
                return self._sock.getpeername()
            except OSError:
                return None
        elif name == "sockname":
            try:
                return self._sock.getsockname()
            except OSError:
                return None
        elif name == "fileno":
            fileno = self._sock.fileno()
            return fileno if fileno != -1 else None
        return None

    def close(self) -> None:
        """Release the socket, any held address and the subsystem reference."""
        if self._role is HandleRole.CLOSED:
            return
        previous = self._role
        self._release_resources()
        self._role = HandleRole.CLOSED
        logger.debug(f"Closed {previous.value} handle")

    def _release_resources(self) -> None:
        sock, self._sock = self._sock, None
        self._address_info = None
        self._listen_address = None
        self._initialized = False
        self._role = HandleRole.UNINITIALIZED
        try:
            if sock is not None:
                sock.close()
        finally:
            if self._holds_subsystem:
                self._holds_subsystem = False
                self._subsystem.release()

    def _ensure_open(self) -> None:
        if self._role is HandleRole.CLOSED:
            raise InvalidHandleError("handle is closed")

    def _require_connected(self) -> socket.socket:
        self._ensure_open()
        sock = self._sock
        if self._role not in _CONNECTED_ROLES or sock is None:
            raise InvalidHandleError(f"{self._role.value} handle is not connected")
        if sock.fileno() == -1:
            raise InvalidHandleError("socket is not a valid connection handle")
        return sock

    def _resolve(self, host: str, port: PortSpec, passive: bool) -> AddressInfo:
        validate_port(port)
        flags = socket.AI_PASSIVE if passive else 0
        try:
            results = socket.getaddrinfo(
                host or None,
                port,
                socket.AF_INET,
                socket.SOCK_STREAM,
                socket.IPPROTO_TCP,
                flags,
            )
        except (OSError, UnicodeError) as e:
            logger.error(f"Unable to resolve {host}:{port}: {e}")
            raise AddressResolutionError(f"Unable to resolve {host}:{port}", cause=e) from e

        if not results:
            raise AddressResolutionError(f"No IPv4 stream address for {host}:{port}")

        return AddressInfo(*results[0])

    def _create_socket(self, address_info: AddressInfo) -> socket.socket:
        try:
            return socket.socket(address_info.family, address_info.type, address_info.proto)
        except OSError as e:
            logger.error(f"Unable to create socket: {e}")
            raise SocketCreationError("Unable to create socket", cause=e) from e

    def _apply_socket_options(self, sock: socket.socket) -> None:
        if not self._config.reuse_address:
            return
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        except OSError as e:
            logger.error(f"Unable to set socket options: {e}")
            raise SocketOptionError("Unable to set SO_REUSEADDR", cause=e) from e


def _pending_bytes(sock: socket.socket) -> int:
    """Return how many bytes can be read from sock without blocking."""
    if sys.platform != "win32":
        result = fcntl.ioctl(sock.fileno(), termios.FIONREAD, struct.pack("i", 0))
        return struct.unpack("i", result)[0]

    readable, _, _ = select.select([sock], [], [], 0)
    if not readable:
        return 0
    return len(sock.recv(1, socket.MSG_PEEK))
