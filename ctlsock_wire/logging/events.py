"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

This module defines typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators

Event Naming Convention:
    <component>.<category>.<action>

    component: control, connection, command, probe, handler
    category: started, opened, unknown
    action: failed, timeout

Example Log Query (CloudWatch Insights):
    fields @timestamp, event, message, metadata.cmd
    | filter event = "command.unknown"
    | stats count() by bin(5m)
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - control.*: Control plane lifecycle
    - connection.*: Per-connection lifecycle
    - command.*: Command dispatch
    - probe.*: Liveness probe outcomes
    - handler.*: Registry changes
    """

    # ========== Control Plane Events ==========
    CONTROL_STARTING = "control.starting"
    """start() called."""

    CONTROL_STARTED = "control.started"
    """Listener bound and accept loop running."""

    CONTROL_ALREADY_RUNNING = "control.already_running"
    """Another instance answered the liveness probe."""

    CONTROL_STALE_SOCKET = "control.stale_socket"
    """Leftover socket file removed before binding."""

    CONTROL_LISTEN_FAILED = "control.listen.failed"
    """Bind or listen on the socket path failed."""

    CONTROL_STOPPING = "control.stopping"
    """stop() called."""

    CONTROL_STOPPED = "control.stopped"
    """Listener closed and socket file removed."""

    ACCEPT_FAILED = "control.accept.failed"
    """accept() failed while the listener was still open."""

    # ========== Connection Events ==========
    CONNECTION_OPENED = "connection.opened"
    """New client connection accepted."""

    CONNECTION_CLOSED = "connection.closed"
    """Connection handler loop exited."""

    CONNECTION_READ_FAILED = "connection.read.failed"
    """Frame could not be read."""

    CONNECTION_WRITE_FAILED = "connection.write.failed"
    """Frame could not be written."""

    # ========== Command Events ==========
    COMMAND_RECEIVED = "command.received"
    """Command frame decoded."""

    COMMAND_RESPONDED = "command.responded"
    """Reply frame written."""

    COMMAND_UNKNOWN = "command.unknown"
    """No handler registered for the command name."""

    COMMAND_FAILED = "command.failed"
    """Handler raised an exception."""

    COMMAND_REPLY_TOO_LARGE = "command.reply.too_large"
    """Handler reply exceeds the frame limit."""

    # ========== Probe Events ==========
    PROBE_NOT_RUNNING = "probe.not_running"
    """Nothing accepted the probe connection."""

    PROBE_RESPONDED = "probe.responded"
    """A running instance reported its identity."""

    PROBE_TIMEOUT = "probe.timeout"
    """A peer accepted the connection but did not answer in time."""

    PROBE_FAILED = "probe.failed"
    """A peer accepted the connection but the exchange broke."""

    # ========== Handler Events ==========
    HANDLER_REGISTERED = "handler.registered"
    """Host handler added to the registry."""


CONTROL_EVENTS = {
    LogEvent.CONTROL_STARTING,
    LogEvent.CONTROL_STARTED,
    LogEvent.CONTROL_ALREADY_RUNNING,
    LogEvent.CONTROL_STALE_SOCKET,
    LogEvent.CONTROL_LISTEN_FAILED,
    LogEvent.CONTROL_STOPPING,
    LogEvent.CONTROL_STOPPED,
    LogEvent.ACCEPT_FAILED,
}

CONNECTION_EVENTS = {
    LogEvent.CONNECTION_OPENED,
    LogEvent.CONNECTION_CLOSED,
    LogEvent.CONNECTION_READ_FAILED,
    LogEvent.CONNECTION_WRITE_FAILED,
}

COMMAND_EVENTS = {
    LogEvent.COMMAND_RECEIVED,
    LogEvent.COMMAND_RESPONDED,
    LogEvent.COMMAND_UNKNOWN,
    LogEvent.COMMAND_FAILED,
    LogEvent.COMMAND_REPLY_TOO_LARGE,
}

PROBE_EVENTS = {
    LogEvent.PROBE_NOT_RUNNING,
    LogEvent.PROBE_RESPONDED,
    LogEvent.PROBE_TIMEOUT,
    LogEvent.PROBE_FAILED,
}
