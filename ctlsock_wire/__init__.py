"""
ctlsock Wire Package
====================

Bounded Context: Communication Protocol for local control endpoints

This package provides the byte-level protocol shared by the control plane
and its clients.

Architecture:
- framing: 2-byte big-endian length-prefixed frames
- schemas: NUL-separated command messages and standard error replies
- logging/: Structured JSON logging for observability

Public API
----------
Framing:
    read_frame, write_frame, MAX_PAYLOAD
    FrameError, ConnectionClosed, FrameTooLargeError

Schemas:
    CommandMessage, unknown_command_reply

Logging:
    LogEvent, StructuredLogger, create_logger, create_discard_logger,
    get_default_logger, set_default_logger

Example (client side):
    >>> import socket
    >>> from ctlsock_wire import CommandMessage, read_frame, write_frame
    >>>
    >>> sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    >>> sock.connect("/run/app.sock")
    >>> write_frame(sock, CommandMessage.build("ping").to_payload())
    >>> read_frame(sock)
    b'pong'
"""

__version__ = "1.0.0"

# Framing
from .framing import (
    MAX_PAYLOAD,
    ConnectionClosed,
    FrameError,
    FrameTooLargeError,
    read_frame,
    write_frame,
)

# Schemas
from .schemas import (
    CommandMessage,
    unknown_command_reply,
)

# Logging
from .logging import (
    LogEvent,
    StructuredLogger,
    create_logger,
    create_discard_logger,
    get_default_logger,
    set_default_logger,
)

__all__ = [
    '__version__',
    # Framing
    'MAX_PAYLOAD',
    'ConnectionClosed',
    'FrameError',
    'FrameTooLargeError',
    'read_frame',
    'write_frame',
    # Schemas
    'CommandMessage',
    'unknown_command_reply',
    # Logging
    'LogEvent',
    'StructuredLogger',
    'create_logger',
    'create_discard_logger',
    'get_default_logger',
    'set_default_logger',
]
