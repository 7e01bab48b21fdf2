"""
Echo server and client example using c_tcp_core.

This example runs a one-client echo server in a background thread and
talks to it from the main thread. Messages are length-prefixed with a
16-bit big-endian header built with the byte-order helpers.
"""

import logging
import os
import struct
import threading
import time

from c_tcp_core import (
    ConnectionError,
    Port,
    Socket,
    SocketConfig,
    host_to_network_short,
    network_to_host_short,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

HOST = "127.0.0.1"
PORT = "50555"

ENV_PREFIX = "C_TCP_CORE_"


def config_from_env(prefix: str = ENV_PREFIX) -> SocketConfig:
    """Build a SocketConfig from <prefix>RECEIVE_BUFFER_SIZE, BACKLOG and REUSE_ADDRESS."""
    kwargs = {}
    buffer_size = os.environ.get(f"{prefix}RECEIVE_BUFFER_SIZE")
    if buffer_size is not None:
        kwargs["receive_buffer_size"] = int(buffer_size)
    backlog = os.environ.get(f"{prefix}BACKLOG")
    if backlog is not None:
        kwargs["backlog"] = int(backlog)
    reuse_address = os.environ.get(f"{prefix}REUSE_ADDRESS")
    if reuse_address is not None:
        kwargs["reuse_address"] = reuse_address.strip().lower() in ("1", "true", "yes", "on")
    return SocketConfig(**kwargs)


def send_message(endpoint: Socket, payload: bytes) -> None:
    """Send one length-prefixed message."""
    header = struct.pack("=H", host_to_network_short(len(payload)))
    remaining = memoryview(header + payload)
    while remaining:
        remaining = remaining[endpoint.send(remaining):]


def receive_message(endpoint: Socket, pending: bytearray) -> bytes:
    """Receive one length-prefixed message, keeping any extra bytes in pending."""
    while True:
        if len(pending) >= 2:
            (raw_length,) = struct.unpack("=H", bytes(pending[:2]))
            length = network_to_host_short(raw_length)
            if len(pending) >= 2 + length:
                message = bytes(pending[2:2 + length])
                del pending[:2 + length]
                return message
        chunk = endpoint.receive()
        if not chunk:
            raise EOFError("peer closed the connection")
        pending.extend(chunk)


def echo_server(port: Port) -> None:
    """Accept one client and echo its messages until it disconnects."""
    with Socket.listen_on(port) as endpoint:
        logger.info(f"Client connected: {endpoint.get_extra_info('peername')}")
        pending = bytearray()
        while True:
            try:
                message = receive_message(endpoint, pending)
            except EOFError:
                break
            send_message(endpoint, message)
    logger.info("Client disconnected")


def connect(port: Port, attempts: int = 50) -> Socket:
    """Connect, waiting for the server thread to start listening."""
    for _ in range(attempts - 1):
        try:
            return Socket.connect_to(port)
        except ConnectionError:
            time.sleep(0.1)
    return Socket.connect_to(port)


def main():
    """Run the echo example."""
    config = config_from_env()

    with Port(HOST, PORT, config=config) as server_port:
        server = threading.Thread(target=echo_server, args=(server_port,))
        server.start()

        with connect(Port(HOST, PORT, config=config)) as client:
            pending = bytearray()
            for text in ("hello", "from", "c_tcp_core"):
                send_message(client, text.encode())
                reply = receive_message(client, pending)
                logger.info(f"Echoed: {reply.decode()}")

        server.join()

    logger.info("Example completed successfully!")


if __name__ == "__main__":
    main()
