"""
ControlPlane - Unix socket control endpoint for a host process

Bounded Context: Control endpoint lifecycle
Responsibilities:
  - Own the socket path, the handler registry and the listener
  - Refuse to start when another instance answers on the same path
  - Spawn one ConnectionHandler thread per accepted connection
  - Stop cleanly (close listener, remove socket file)

Threading:
  - Accept loop runs on its own daemon thread (Listener)
  - Each connection runs on its own daemon thread (ConnectionHandler)
  - start()/stop() are serialized by a lock
  - Handlers run on connection threads (keep them fast!)
"""

import itertools
import os
import socket
import threading
from pathlib import Path
from typing import Iterable, Optional, Union

from ctlsock_wire.logging import LogEvent, StructuredLogger, get_default_logger

from .builtin_commands import builtin_registry
from .config import ControlConfig
from .connection import ConnectionHandler
from .errors import AlreadyRunningError, ListenError
from .listener import Listener
from .probe import PROBE_TIMEOUT, probe
from .registry import Handler, HandlerFunc, HandlerRegistry

_ids = itertools.count(1)


class ControlPlane:
    """
    In-process control endpoint.

    Features:
      - Built-in ping, pid and help commands
      - Host handlers registered by name with a description
      - Liveness probe prevents two instances on one socket path
      - Thread per connection, strict request/reply order per connection

    Example:
        control_plane = ControlPlane("/run/myapp/control.sock")

        # Register commands
        control_plane.register('status', "report service status", lambda args: "ok")

        # Start listening (non-blocking)
        control_plane.start()

        # Later: stop
        control_plane.stop()
    """

    def __init__(
        self,
        socket_path: Union[str, Path],
        logger: Optional[StructuredLogger] = None,
        probe_timeout: float = PROBE_TIMEOUT,
        poll_interval: float = 0.2,
    ):
        """
        Initialize control plane.

        Args:
            socket_path: Filesystem path for the Unix socket
            logger: Structured logger (default: process default sink)
            probe_timeout: Seconds to wait for a running instance to answer
            poll_interval: Seconds between checks for listener closure
        """
        self._socket_path = Path(socket_path)
        self.logger = (logger or get_default_logger()).bind(id=next(_ids))
        self.probe_timeout = probe_timeout
        self.poll_interval = poll_interval

        self._registry = builtin_registry()
        self._listener: Optional[Listener] = None
        self._lifecycle_lock = threading.Lock()
        self._connection_ids = itertools.count(1)

    @classmethod
    def from_config(
        cls,
        config: ControlConfig,
        logger: Optional[StructuredLogger] = None,
    ) -> "ControlPlane":
        """Build a control plane from a ControlConfig."""
        return cls(
            socket_path=config.socket_path,
            logger=logger,
            probe_timeout=config.probe_timeout,
            poll_interval=config.poll_interval,
        )

    @property
    def socket_path(self) -> Path:
        return self._socket_path

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    @property
    def is_running(self) -> bool:
        return self._listener is not None

    def register(self, name: str, description: str, fn: HandlerFunc) -> Handler:
        """
        Register a host command.

        Raises:
            HandlerExistsError: If the name is taken (built-ins included)
        """
        handler = self._registry.register(name, description, fn)
        self.logger.debug(
            event=LogEvent.HANDLER_REGISTERED,
            message="Handler registered.",
            metadata={'cmd': name}
        )
        return handler

    def register_many(self, handlers: Iterable[Handler]) -> None:
        """
        Register several host commands, all or nothing.

        Raises:
            HandlerExistsError: If any name is taken or repeated in the batch
        """
        batch = list(handlers)
        self._registry.register_many(batch)
        self.logger.debug(
            event=LogEvent.HANDLER_REGISTERED,
            message="Handlers registered.",
            metadata={'cmd': [h.name for h in batch]}
        )

    def start(self) -> None:
        """
        Start listening on the socket path.

        Returns once the socket is bound; connections are served on
        background threads.

        Raises:
            AlreadyRunningError: If this or another instance already serves the path
            ListenError: If the socket cannot be bound
        """
        path = str(self._socket_path)
        self.logger.info(
            event=LogEvent.CONTROL_STARTING,
            message="Starting command listener.",
            metadata={'path': path}
        )

        with self._lifecycle_lock:
            if self._listener is not None:
                self.logger.critical(
                    event=LogEvent.CONTROL_ALREADY_RUNNING,
                    message="Command listener already running.",
                    metadata={'path': path, 'pid': os.getpid()}
                )
                raise AlreadyRunningError(path, str(os.getpid()))

            pid = probe(self._socket_path, timeout=self.probe_timeout, logger=self.logger)
            if pid:
                self.logger.critical(
                    event=LogEvent.CONTROL_ALREADY_RUNNING,
                    message="Command listener already running.",
                    metadata={'path': path, 'pid': pid}
                )
                raise AlreadyRunningError(path, pid)

            listener = Listener(
                self._socket_path,
                on_connection=self._serve_connection,
                logger=self.logger,
                poll_interval=self.poll_interval,
            )
            try:
                listener.bind()
            except ListenError as e:
                self.logger.critical(
                    event=LogEvent.CONTROL_LISTEN_FAILED,
                    message="Couldn't listen on socket.",
                    metadata={'path': path, 'error': str(e)}
                )
                raise

            listener.start()
            self._listener = listener

        self.logger.info(
            event=LogEvent.CONTROL_STARTED,
            message="Command listener started.",
            metadata={'path': path, 'commands': self._registry.names()}
        )

    def stop(self) -> None:
        """
        Stop accepting connections and remove the socket file.

        Safe to call when not running. Connections already accepted keep
        being served until their peers disconnect.
        """
        self.logger.info(
            event=LogEvent.CONTROL_STOPPING,
            message="Stopping command listener.",
            metadata={'path': str(self._socket_path)}
        )

        with self._lifecycle_lock:
            listener, self._listener = self._listener, None
            if listener is None:
                return
            listener.close()

        self.logger.info(
            event=LogEvent.CONTROL_STOPPED,
            message="Command listener stopped.",
            metadata={'path': str(self._socket_path)}
        )

    def _serve_connection(self, conn: socket.socket) -> None:
        conn_id = next(self._connection_ids)
        handler = ConnectionHandler(conn, self._registry, self.logger.bind(conn=conn_id))
        thread = threading.Thread(
            target=handler.run,
            name=f"ctlsock-conn-{conn_id}",
            daemon=True,
        )
        thread.start()
