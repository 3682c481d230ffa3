"""
Unix socket client for sending commands to a control endpoint.

Handles connection, request framing, reply decoding and disconnection.
"""

import socket
from pathlib import Path
from typing import Sequence, Union

from ctlsock_wire import CommandMessage, read_frame, write_frame


class SocketCommandClient:
    """
    Client for sending one command per connection to a ControlPlane.
    """

    def __init__(
        self,
        socket_path: Union[str, Path],
        timeout: float = 5.0
    ):
        """
        Initialize socket command client.

        Args:
            socket_path: Control socket path
            timeout: Seconds to wait for connect and reply
        """
        self.socket_path = str(socket_path)
        self.timeout = timeout

    def send_command(
        self,
        command: str,
        args: Sequence[str] = ()
    ) -> str:
        """
        Send a command and return the reply text.

        Args:
            command: Command name (e.g., "ping")
            args: Positional arguments

        Raises:
            ConnectionError: If unable to connect to the control socket
            RuntimeError: If the reply cannot be read
            ValueError: If the request is not encodable as a single frame
        """
        payload = CommandMessage.build(command, args).to_payload()

        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(self.timeout)
            try:
                sock.connect(self.socket_path)
            except OSError as e:
                raise ConnectionError(
                    f"Couldn't connect to {self.socket_path}: {e}. "
                    "Is the host process running?"
                ) from e

            try:
                write_frame(sock, payload)
                reply = read_frame(sock)
            except OSError as e:
                raise RuntimeError(f"Error reading response from command: {e}") from e

        return reply.decode("utf-8", errors="replace")
