"""
Byte-order utilities for c_tcp_core.

Conversions of 16-bit and 32-bit unsigned integers between host and
network (big-endian) byte order. These are the only encoding helpers
the library offers; framing is left to the caller.
"""

import socket

UINT16_MAX = 0xFFFF
UINT32_MAX = 0xFFFFFFFF


def _check_range(value: int, maximum: int, bits: int) -> None:
    # Older interpreters truncate out-of-range values with only a warning.
    if not 0 <= value <= maximum:
        raise OverflowError(f"{value} does not fit in an unsigned {bits}-bit integer")


def host_to_network_short(value: int) -> int:
    """
    Convert a 16-bit unsigned integer from host to network byte order.

    Args:
        value: Integer in range 0..0xFFFF

    Returns:
        The value in network byte order

    Raises:
        OverflowError: If value does not fit in 16 bits
    """
    _check_range(value, UINT16_MAX, 16)
    return socket.htons(value)


def host_to_network_long(value: int) -> int:
    """
    Convert a 32-bit unsigned integer from host to network byte order.

    Args:
        value: Integer in range 0..0xFFFFFFFF

    Returns:
        The value in network byte order

    Raises:
        OverflowError: If value does not fit in 32 bits
    """
    _check_range(value, UINT32_MAX, 32)
    return socket.htonl(value)


def network_to_host_short(value: int) -> int:
    """Convert a 16-bit unsigned integer from network to host byte order."""
    _check_range(value, UINT16_MAX, 16)
    return socket.ntohs(value)


def network_to_host_long(value: int) -> int:
    """Convert a 32-bit unsigned integer from network to host byte order."""
    _check_range(value, UINT32_MAX, 32)
    return socket.ntohl(value)
