"""
Framed Channel Codec
====================

Bounded Context: Wire Protocol

This module encodes and decodes single messages on a stream socket.

Frame format:
    [2 bytes big-endian length][payload bytes]

Design:
- Payloads are bounded by the 16-bit length field (max 65535 bytes)
- Oversized payloads are rejected, never truncated
- Reads loop until the declared length is satisfied
- A zero-length frame is returned without issuing a zero-byte read

Example:
    >>> import socket
    >>> a, b = socket.socketpair()
    >>> write_frame(a, b"ping")
    >>> read_frame(b)
    b'ping'
"""

import socket
import struct
import time
from typing import Optional

HEADER = struct.Struct(">H")
MAX_PAYLOAD = 0xFFFF


class FrameError(ConnectionError):
    """Raised when a frame cannot be read completely."""
    pass


class ConnectionClosed(FrameError):
    """Raised when the peer closes the connection between frames."""
    pass


class FrameTooLargeError(ValueError):
    """Raised when a payload does not fit in the 16-bit length field."""

    def __init__(self, size: int):
        super().__init__(f"payload of {size} bytes exceeds {MAX_PAYLOAD} byte frame limit")
        self.size = size


def write_frame(sock: socket.socket, payload: bytes) -> None:
    """
    Write one length-prefixed frame.

    Args:
        sock: Connected stream socket
        payload: Raw payload bytes

    Raises:
        FrameTooLargeError: If payload is longer than MAX_PAYLOAD
        OSError: If the underlying socket fails
    """
    if not isinstance(payload, (bytes, bytearray)):
        raise TypeError("payload must be bytes")
    if len(payload) > MAX_PAYLOAD:
        raise FrameTooLargeError(len(payload))

    sock.sendall(HEADER.pack(len(payload)) + bytes(payload))


def read_frame(sock: socket.socket, deadline: Optional[float] = None) -> bytes:
    """
    Read one length-prefixed frame.

    Args:
        sock: Connected stream socket
        deadline: Optional time.monotonic() value bounding the whole read.
            The socket timeout is reset to the time left before every recv.

    Returns:
        Payload bytes (possibly empty)

    Raises:
        ConnectionClosed: Peer closed before sending a header byte
        FrameError: Peer closed in the middle of a frame
        socket.timeout: The deadline passed before the frame was complete
        OSError: Underlying socket error
    """
    header = _recv_exactly(sock, HEADER.size, at_boundary=True, deadline=deadline)
    (length,) = HEADER.unpack(header)

    if length == 0:
        return b""

    return _recv_exactly(sock, length, deadline=deadline)


def time_left(sock: socket.socket, deadline: float) -> None:
    """Set the socket timeout to what remains before `deadline`, or raise socket.timeout."""
    left = deadline - time.monotonic()
    if left <= 0:
        raise socket.timeout("timed out")
    sock.settimeout(left)


def _recv_exactly(
    sock: socket.socket,
    n: int,
    at_boundary: bool = False,
    deadline: Optional[float] = None,
) -> bytes:
    chunks = []
    remaining = n
    while remaining > 0:
        if deadline is not None:
            time_left(sock, deadline)
        chunk = sock.recv(remaining)
        if chunk == b"":
            received = n - remaining
            if at_boundary and received == 0:
                raise ConnectionClosed("connection closed by peer")
            raise FrameError(f"connection closed after {received} of {n} bytes")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)
