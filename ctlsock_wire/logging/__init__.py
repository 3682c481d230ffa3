"""
Structured Logging for ctlsock
==============================

Bounded Context: Observability

This module provides JSON-structured logging for control endpoints.

Design:
- JSON output (parseable by ELK, CloudWatch, Loki)
- Typed events (enums prevent typos)
- Contextual metadata (control plane id, socket path, command)
- Discarding default sink (libraries stay silent until the host opts in)

Public API
----------
    LogEvent: Typed event names (enum)
    StructuredLogger: JSON logger implementation
    create_logger: Factory function
    create_discard_logger: Logger that drops everything
    get_default_logger / set_default_logger: Process-wide sink

Example:
    >>> from ctlsock_wire.logging import create_logger, set_default_logger
    >>> set_default_logger(create_logger("control"))

Output:
    {
        "timestamp": "2026-10-19T15:30:45.123456+00:00",
        "level": "INFO",
        "component": "control",
        "event": "connection.opened",
        "message": "New connection.",
        "metadata": {"id": 1}
    }
"""

from .events import LogEvent
from .structured import (
    StructuredLogger,
    create_logger,
    create_discard_logger,
    get_default_logger,
    set_default_logger,
)

__all__ = [
    'LogEvent',
    'StructuredLogger',
    'create_logger',
    'create_discard_logger',
    'get_default_logger',
    'set_default_logger',
]
