"""
ConnectionHandler - per-connection command loop

Bounded Context: Command dispatch
Responsibilities:
  - Read one frame at a time from an accepted connection
  - Decode the command message and dispatch through the registry
  - Write exactly one reply frame per request, in arrival order
  - Close the connection when the peer goes away or the transport fails

State machine:
    OPEN -> dispatch loop -> CLOSED

Threading:
  - One ConnectionHandler per accepted connection, each on its own thread
  - The only shared state is the HandlerRegistry (read-only lookups)
  - A slow handler stalls only its own connection
"""

import socket

from ctlsock_wire.framing import (
    ConnectionClosed,
    FrameTooLargeError,
    read_frame,
    write_frame,
)
from ctlsock_wire.logging import LogEvent, StructuredLogger
from ctlsock_wire.schemas import (
    CommandMessage,
    command_failed_reply,
    reply_too_large,
    unknown_command_reply,
)

from .registry import HandlerRegistry


def dispatch(
    registry: HandlerRegistry,
    message: CommandMessage,
    logger: StructuredLogger,
) -> str:
    """
    Run the handler for `message` and return the reply text.

    Unknown commands and handler failures are rendered as ERROR replies so
    the connection keeps serving.
    """
    handler = registry.lookup(message.name)
    if handler is None:
        logger.info(
            event=LogEvent.COMMAND_UNKNOWN,
            message="Unknown command.",
            metadata={'cmd': message.name}
        )
        return unknown_command_reply(message.name)

    try:
        reply = handler.run(list(message.args))
    except Exception as e:
        logger.error(
            event=LogEvent.COMMAND_FAILED,
            message="Handler raised.",
            metadata={'cmd': message.name},
            exc_info=e
        )
        return command_failed_reply(message.name, e)

    if not isinstance(reply, str):
        reply = "" if reply is None else str(reply)
    return reply


class ConnectionHandler:
    """
    Serves one accepted connection until it closes.

    Example:
        handler = ConnectionHandler(conn, registry, logger)
        threading.Thread(target=handler.run, daemon=True).start()
    """

    def __init__(self, conn: socket.socket, registry: HandlerRegistry, logger: StructuredLogger):
        self.conn = conn
        self.registry = registry
        self.logger = logger

    def run(self) -> None:
        """Dispatch loop. Returns once the connection is closed."""
        self.logger.info(event=LogEvent.CONNECTION_OPENED, message="New connection.")
        try:
            while self._serve_one():
                pass
        finally:
            self.conn.close()
            self.logger.info(event=LogEvent.CONNECTION_CLOSED, message="Connection closed.")

    def _serve_one(self) -> bool:
        """Handle a single request. Returns False when the loop should stop."""
        try:
            payload = read_frame(self.conn)
        except ConnectionClosed:
            self.logger.debug(
                event=LogEvent.CONNECTION_READ_FAILED,
                message="Peer closed connection."
            )
            return False
        except OSError as e:
            self.logger.error(
                event=LogEvent.CONNECTION_READ_FAILED,
                message="Error reading from connection.",
                metadata={'error': str(e)}
            )
            return False

        message = CommandMessage.from_payload(payload)
        self.logger.debug(
            event=LogEvent.COMMAND_RECEIVED,
            message="Got command.",
            metadata={'cmd': [message.name, *message.args]}
        )

        reply = dispatch(self.registry, message, self.logger)
        data = reply.encode("utf-8")

        try:
            try:
                write_frame(self.conn, data)
            except FrameTooLargeError as e:
                self.logger.error(
                    event=LogEvent.COMMAND_REPLY_TOO_LARGE,
                    message="Reply does not fit in one frame.",
                    metadata={'cmd': message.name, 'size': e.size}
                )
                write_frame(self.conn, reply_too_large(e.size).encode("utf-8"))
        except OSError as e:
            self.logger.error(
                event=LogEvent.CONNECTION_WRITE_FAILED,
                message="Error writing to connection.",
                metadata={'error': str(e)}
            )
            return False

        self.logger.debug(
            event=LogEvent.COMMAND_RESPONDED,
            message="Responding.",
            metadata={'resp': reply}
        )
        return True
