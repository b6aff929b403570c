"""Free TCP port discovery for the server bootstrap."""

import socket

from docingest.exceptions import PortUnavailableError
from docingest.utils.logger import get_logger

logger = get_logger(__name__)

MAX_PORT = 65535


def is_port_free(port: int, host: str = "0.0.0.0") -> bool:
    """Check whether a listening socket can be bound on ``host:port``.

    The test socket is always closed before returning.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
            sock.listen(1)
        except OSError:
            return False
    return True


def find_free_port(
    start: int,
    host: str = "0.0.0.0",
    max_attempts: int = 100,
) -> int:
    """Return the first port at or above ``start`` that can be bound.

    Ports are checked in ascending order without delay. The test socket is
    closed before the port is returned, so the caller binds it again later.
    Another process can take the port in between; callers must treat a
    failed bind at that point as a startup error rather than assume the
    port is reserved.

    Args:
        start: First candidate port.
        host: Interface to check.
        max_attempts: Maximum number of candidates to try.

    Returns:
        A port number that was free when it was checked.

    Raises:
        PortUnavailableError: If every candidate within the budget is taken.
    """
    last = min(start + max_attempts, MAX_PORT + 1)
    for port in range(start, last):
        if is_port_free(port, host):
            logger.info("Port %d is free", port)
            return port
        logger.warning("Port %d is in use, trying %d", port, port + 1)

    raise PortUnavailableError(
        f"No free port found in range {start}-{last - 1} on {host}"
    )
