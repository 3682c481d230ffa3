"""
Liveness probe for an existing control endpoint.

Connects to the socket path and asks for the `pid` of whatever answers.
A refused connection means nothing is running. A peer that accepts but does
not reply within the timeout is treated as not running too, so a wedged
instance cannot block a new one from starting.
"""

import socket
import time
from pathlib import Path
from typing import Optional, Union

from ctlsock_wire.framing import read_frame, time_left, write_frame
from ctlsock_wire.logging import LogEvent, StructuredLogger, get_default_logger
from ctlsock_wire.schemas import CommandMessage

# How long to wait for a response before giving up.
PROBE_TIMEOUT = 0.1

PROBE_COMMAND = "pid"


def probe(
    socket_path: Union[str, Path],
    timeout: float = PROBE_TIMEOUT,
    logger: Optional[StructuredLogger] = None,
) -> Optional[str]:
    """
    Ask a running instance at `socket_path` for its identity.

    Args:
        socket_path: Control socket path
        timeout: Seconds the whole exchange may take
        logger: Structured logger (default: process default sink)

    Returns:
        The reply to `pid` if something answered, otherwise None
    """
    logger = logger or get_default_logger()
    path = str(socket_path)

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    deadline = time.monotonic() + timeout
    sock.settimeout(timeout)
    try:
        try:
            sock.connect(path)
        except OSError as e:
            logger.debug(
                event=LogEvent.PROBE_NOT_RUNNING,
                message="No command listener running.",
                metadata={'path': path, 'error': str(e)}
            )
            return None

        try:
            time_left(sock, deadline)
            write_frame(sock, CommandMessage.build(PROBE_COMMAND).to_payload())
            reply = read_frame(sock, deadline=deadline)
        except socket.timeout:
            logger.warning(
                event=LogEvent.PROBE_TIMEOUT,
                message="Timed out checking PID of existing service.",
                metadata={'path': path, 'timeout': timeout}
            )
            return None
        except OSError as e:
            logger.warning(
                event=LogEvent.PROBE_FAILED,
                message="Existing service did not answer probe.",
                metadata={'path': path, 'error': str(e)}
            )
            return None
    finally:
        sock.close()

    pid = reply.decode("utf-8", errors="replace")
    logger.debug(
        event=LogEvent.PROBE_RESPONDED,
        message="Existing service answered probe.",
        metadata={'path': path, 'pid': pid}
    )
    return pid
