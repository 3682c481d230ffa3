"""
Listener - Unix socket acceptor

Bounded Context: Connection acceptance
Responsibilities:
  - Bind an exclusive AF_UNIX stream socket at a filesystem path
  - Remove a stale socket file left behind by a dead instance
  - Run the accept loop on a background thread
  - Hand every accepted connection to a callback without blocking accept
  - Close the socket and remove the path on close()

Threading:
  - accept() polls with a short timeout so that close() from another thread
    is observed promptly on every platform
  - The accept loop ends exactly when the listener is closed; an accept error
    while still open is logged at CRITICAL and also ends serving
"""

import contextlib
import os
import socket
import stat
import threading
from pathlib import Path
from typing import Callable, Optional, Tuple

from ctlsock_wire.logging import LogEvent, StructuredLogger

from .errors import ListenError

BACKLOG = 16


def remove_stale_socket(path: Path) -> bool:
    """
    Unlink `path` if it is a socket file.

    Regular files and directories are left alone so that bind() fails
    loudly instead of deleting data.

    Returns:
        True if a socket file was removed
    """
    try:
        mode = os.lstat(path).st_mode
    except FileNotFoundError:
        return False
    if not stat.S_ISSOCK(mode):
        return False
    with contextlib.suppress(FileNotFoundError):
        os.unlink(path)
    return True


def _file_identity(path: Path) -> Tuple[int, int, int]:
    st = os.stat(path)
    return st.st_dev, st.st_ino, st.st_ctime_ns


class Listener:
    """
    Accepts connections on a Unix socket and dispatches them to a callback.

    Example:
        listener = Listener(path, on_connection=serve, logger=logger)
        listener.bind()
        listener.start()
        ...
        listener.close()
    """

    def __init__(
        self,
        socket_path: Path,
        on_connection: Callable[[socket.socket], None],
        logger: StructuredLogger,
        poll_interval: float = 0.2,
    ):
        self.socket_path = Path(socket_path)
        self.on_connection = on_connection
        self.logger = logger
        self.poll_interval = poll_interval

        self._sock: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._closed = threading.Event()
        self._identity: Optional[Tuple[int, int, int]] = None

    def bind(self) -> None:
        """
        Bind and listen on the socket path.

        Raises:
            ListenError: If bind or listen fails
        """
        if remove_stale_socket(self.socket_path):
            self.logger.info(
                event=LogEvent.CONTROL_STALE_SOCKET,
                message="Removed stale socket file.",
                metadata={'path': str(self.socket_path)}
            )

        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.bind(str(self.socket_path))
            sock.listen(BACKLOG)
            self._identity = _file_identity(self.socket_path)
        except OSError as e:
            sock.close()
            raise ListenError(str(self.socket_path), str(e)) from e

        sock.settimeout(self.poll_interval)
        self._sock = sock

    def start(self) -> None:
        """Start the accept loop on a daemon thread."""
        if self._sock is None:
            raise RuntimeError("Listener not bound. Call bind() first.")

        self._thread = threading.Thread(
            target=self._accept_loop,
            name=f"ctlsock-accept-{self.socket_path.name}",
            daemon=True,
        )
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """
        Stop accepting, close the socket and remove the socket file.

        Safe to call multiple times. In-flight connections are not touched.
        """
        if self._closed.is_set():
            return
        self._closed.set()

        if self._sock is not None:
            self._sock.close()
            self._sock = None
            self._remove_socket_file()

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.poll_interval * 5)

    def _remove_socket_file(self) -> None:
        # Another instance may have replaced the file after we bound it.
        try:
            if _file_identity(self.socket_path) != self._identity:
                return
            os.unlink(self.socket_path)
        except FileNotFoundError:
            pass

    def _accept_loop(self) -> None:
        sock = self._sock
        while not self._closed.is_set():
            try:
                conn, _ = sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._closed.is_set():
                    break
                self.logger.critical(
                    event=LogEvent.ACCEPT_FAILED,
                    message="Error accepting connection.",
                    metadata={'path': str(self.socket_path), 'error': str(e)},
                    exc_info=e
                )
                break

            conn.settimeout(None)
            self.on_connection(conn)
