"""Exceptions raised to the host by the control plane."""

from typing import Optional


class ControlError(Exception):
    """Base class for control plane errors."""


class HandlerExistsError(ControlError):
    """Raised when registering a command name that is already taken."""

    def __init__(self, name: str):
        super().__init__(f"handler exists: '{name}'")
        self.name = name


class AlreadyRunningError(ControlError):
    """Raised by start() when another listener already answers on the socket path."""

    def __init__(self, socket_path: str, pid: Optional[str] = None):
        if pid:
            message = f"already running on pid {pid} ({socket_path})"
        else:
            message = f"already running ({socket_path})"
        super().__init__(message)
        self.socket_path = socket_path
        self.pid = pid


class ListenError(ControlError):
    """Raised by start() when the socket cannot be bound or listened on."""

    def __init__(self, socket_path: str, reason: str):
        super().__init__(f"couldn't listen on socket {socket_path}: {reason}")
        self.socket_path = socket_path
