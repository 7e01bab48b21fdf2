"""
Process-wide networking subsystem lifecycle.

The subsystem is started when the first handle needs it and torn down
when the last handle holding a reference releases it. Every handle
that performed initialization owns exactly one reference.
"""

import logging
import socket
import threading

from ..exceptions import SubsystemInitError

logger = logging.getLogger(__name__)


class NetworkSubsystem:
    """
    Reference-counted networking subsystem.

    acquire() starts the subsystem on the 0 -> 1 transition and
    release() tears it down on the 1 -> 0 transition. Both are safe to
    call from multiple threads.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._references = 0
        self._startups = 0

    @property
    def reference_count(self) -> int:
        """Number of handles currently holding the subsystem."""
        return self._references

    @property
    def is_initialized(self) -> bool:
        """Check if the subsystem is currently started."""
        return self._references > 0

    @property
    def startup_count(self) -> int:
        """Number of times the subsystem has been started."""
        return self._startups

    def acquire(self) -> None:
        """
        Take a reference, starting the subsystem if this is the first one.

        Raises:
            SubsystemInitError: If startup fails. No reference is taken.
        """
        with self._lock:
            if self._references == 0:
                self._startup()
                self._startups += 1
            self._references += 1

    def release(self) -> None:
        """
        Drop a reference, tearing the subsystem down if it was the last one.

        Raises:
            RuntimeError: If no reference is held
        """
        with self._lock:
            if self._references == 0:
                raise RuntimeError("Network subsystem released more times than acquired")
            self._references -= 1
            if self._references == 0:
                self._teardown()

    def _startup(self) -> None:
        for name in ("AF_INET", "SOCK_STREAM", "IPPROTO_TCP"):
            if not hasattr(socket, name):
                raise SubsystemInitError(f"socket.{name} is not available")

        try:
            socket.inet_pton(socket.AF_INET, "127.0.0.1")
        except (OSError, AttributeError) as e:
            raise SubsystemInitError("IPv4 is not supported by this platform", cause=e) from e

        logger.debug("Network subsystem started")

    def _teardown(self) -> None:
        logger.debug("Network subsystem torn down")


_default_subsystem = NetworkSubsystem()


def get_default_subsystem() -> NetworkSubsystem:
    """Return the subsystem shared by every handle in the process."""
    return _default_subsystem
