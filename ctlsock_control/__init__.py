"""
ctlsock_control - In-process control endpoint over a Unix socket

Bounded Context: Local command-and-control for a running process
Responsibilities:
  - Socket lifecycle (start, stop, stale socket cleanup)
  - Command registration and lookup
  - Per-connection command dispatch
  - Detection of an already-running instance

Architecture:
  - HandlerRegistry: Explicit registration, duplicates rejected
  - ControlPlane: Listener + ConnectionHandler threads + liveness probe
  - Framed wire protocol from ctlsock_wire

Design Philosophy:
  - Explicit registration (fail-fast, no runtime surprises)
  - Built-ins (ping, pid, help) cannot be overridden
  - Errors answered as text (unknown commands never close a connection)
  - No network port: local callers only, no authentication
"""

from .builtin_commands import BUILTIN_HANDLERS, builtin_registry
from .config import ControlConfig
from .errors import (
    AlreadyRunningError,
    ControlError,
    HandlerExistsError,
    ListenError,
)
from .plane import ControlPlane
from .probe import PROBE_TIMEOUT, probe
from .registry import Handler, HandlerRegistry

__all__ = [
    "BUILTIN_HANDLERS",
    "builtin_registry",
    "ControlConfig",
    "AlreadyRunningError",
    "ControlError",
    "HandlerExistsError",
    "ListenError",
    "ControlPlane",
    "PROBE_TIMEOUT",
    "probe",
    "Handler",
    "HandlerRegistry",
]
