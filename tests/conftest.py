"""
Pytest configuration for c_tcp_core tests.

This file contains shared fixtures and configuration
for all tests in the project.
"""

import os
import socket
import sys
import threading
import time
from typing import Callable, Iterator, Optional, Tuple

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from c_tcp_core import ConnectionError, Port, Socket, SocketConfig  # noqa: E402
from c_tcp_core.network import NetworkSubsystem  # noqa: E402

LOOPBACK = "127.0.0.1"


class ServerThread(threading.Thread):
    """Runs Socket.listen_on() in the background and keeps the result."""

    def __init__(self, port: Port) -> None:
        super().__init__(daemon=True)
        self.port = port
        self.endpoint: Optional[Socket] = None
        self.error: Optional[Exception] = None

    def run(self) -> None:
        try:
            self.endpoint = Socket.listen_on(self.port)
        except Exception as e:
            self.error = e

    def result(self, timeout: float = 5.0) -> Socket:
        self.join(timeout)
        assert not self.is_alive(), "server did not accept a client in time"
        if self.error is not None:
            raise self.error
        assert self.endpoint is not None
        return self.endpoint


def connect_retrying(port: Port, attempts: int = 250, delay: float = 0.02) -> Socket:
    """Connect to a Port whose listener may still be starting up."""
    for _ in range(attempts - 1):
        try:
            return Socket.connect_to(port)
        except ConnectionError:
            time.sleep(delay)
    return Socket.connect_to(port)


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> bool:
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


@pytest.fixture
def free_port() -> str:
    """Find a loopback port with nothing listening on it."""
    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        probe.bind((LOOPBACK, 0))
        return str(probe.getsockname()[1])
    finally:
        probe.close()


@pytest.fixture
def subsystem() -> NetworkSubsystem:
    """An isolated networking subsystem so reference counts start at zero."""
    return NetworkSubsystem()


@pytest.fixture
def make_pair(free_port: str, subsystem: NetworkSubsystem):
    """Create connected (server, client) endpoint pairs on a loopback port."""
    created = []

    def _make_pair(config: Optional[SocketConfig] = None) -> Tuple[Socket, Socket]:
        server_port = Port(LOOPBACK, free_port, config=config, subsystem=subsystem)
        client_port = Port(LOOPBACK, free_port, config=config, subsystem=subsystem)
        server_thread = ServerThread(server_port)
        server_thread.start()
        client = connect_retrying(client_port)
        server = server_thread.result()
        created.append((server_port, client_port, server, client))
        return server, client

    yield _make_pair

    for server_port, client_port, server, client in created:
        client.close()
        server.close()
        client_port.close()
        server_port.close()


@pytest.fixture
def connected_pair(make_pair) -> Iterator[Tuple[Socket, Socket]]:
    """A connected (server, client) endpoint pair with default configuration."""
    yield make_pair()
