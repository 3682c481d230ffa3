"""
Structured JSON Logger
=====================

Bounded Context: Observability Infrastructure

This module provides a structured logger that outputs JSON logs.

Design:
- JSON output (compatible with log aggregators)
- Thread-safe (uses standard logging module)
- Contextual metadata bound once per component (e.g. control plane id)
- Type-safe events (LogEvent enum)
- Discarding default sink until the host installs one

Example:
    >>> logger = StructuredLogger(component="control")
    >>> logger.info(
    ...     event=LogEvent.CONTROL_STARTED,
    ...     message="Command listener started",
    ...     metadata={'path': '/run/app.sock'}
    ... )

Output:
    {
        "timestamp": "2026-10-19T15:30:45.123456",
        "level": "INFO",
        "component": "control",
        "event": "control.started",
        "message": "Command listener started",
        "metadata": {"path": "/run/app.sock"}
    }
"""

import copy
import json
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from .events import LogEvent

DISCARD_LOGGER_NAME = "ctlsock.discard"


class StructuredLogger:
    """
    JSON structured logger.

    Wraps Python's logging module with structured metadata support.

    Attributes:
        component: Component name (e.g., "control", "cli")
        context: Metadata merged into every record
        logger: Underlying Python logger instance

    Example:
        >>> logger = StructuredLogger("control").bind(id=1)
        >>> logger.debug(
        ...     event=LogEvent.COMMAND_RECEIVED,
        ...     message="Got command",
        ...     metadata={'cmd': ['ping']}
        ... )

    Thread Safety:
        Thread-safe via Python's logging module.
    """

    def __init__(
        self,
        component: str,
        level: int = logging.INFO,
        logger_name: Optional[str] = None,
        handler: Optional[logging.Handler] = None
    ):
        """
        Initialize structured logger.

        Args:
            component: Component identifier (e.g., "control")
            level: Logging level (default: INFO)
            logger_name: Custom logger name (default: ctlsock.<component>)
            handler: Handler to attach when the logger has none
                     (default: stderr stream with JSON formatter)
        """
        self.component = component
        self.context: Dict[str, Any] = {}
        self.logger_name = logger_name or f"ctlsock.{component}"
        self.logger = logging.getLogger(self.logger_name)
        self.logger.setLevel(level)

        # Configure JSON formatter if not already configured
        if not self.logger.handlers:
            handler = handler or logging.StreamHandler()
            handler.setFormatter(JSONFormatter())
            self.logger.addHandler(handler)

    def bind(self, **context: Any) -> "StructuredLogger":
        """
        Return a logger that adds `context` to every record's metadata.

        The returned logger shares the underlying Python logger.
        """
        child = copy.copy(self)
        child.context = {**self.context, **context}
        return child

    def _log(
        self,
        level: int,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Internal log method with structured format.

        Args:
            level: Python log level
            event: Typed log event
            message: Human-readable message
            metadata: Additional context (path, cmd, etc.)
            exc_info: Exception for ERROR/CRITICAL logs
        """
        if not self.logger.isEnabledFor(level):
            return

        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': logging.getLevelName(level),
            'component': self.component,
            'event': event.value,
            'message': message,
        }

        merged = {**self.context, **(metadata or {})}
        if merged:
            log_entry['metadata'] = merged

        if exc_info:
            log_entry['exception'] = {
                'type': type(exc_info).__name__,
                'message': str(exc_info)
            }

        self.logger.log(
            level,
            json.dumps(log_entry, default=str),
            exc_info=exc_info if level >= logging.ERROR else None
        )

    def debug(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """Log DEBUG level message."""
        self._log(logging.DEBUG, event, message, metadata)

    def info(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log INFO level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
        """
        self._log(logging.INFO, event, message, metadata)

    def warning(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log WARNING level message.

        Example:
            >>> logger.warning(
            ...     event=LogEvent.PROBE_TIMEOUT,
            ...     message="Timed out checking PID of existing service",
            ...     metadata={'path': '/run/app.sock'}
            ... )
        """
        self._log(logging.WARNING, event, message, metadata)

    def error(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """
        Log ERROR level message.

        Args:
            event: Typed log event
            message: Human-readable message
            metadata: Additional context
            exc_info: Exception instance for traceback
        """
        self._log(logging.ERROR, event, message, metadata, exc_info)

    def critical(
        self,
        event: LogEvent,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        exc_info: Optional[BaseException] = None
    ) -> None:
        """Log CRITICAL level message (startup failures, dead accept loop)."""
        self._log(logging.CRITICAL, event, message, metadata, exc_info)

    def set_level(self, level: int) -> None:
        """
        Change logging level dynamically.

        Args:
            level: New logging level (logging.DEBUG, INFO, WARNING, ERROR)
        """
        self.logger.setLevel(level)


class JSONFormatter(logging.Formatter):
    """
    Formatter used internally by StructuredLogger.

    The message from StructuredLogger is already JSON, so it is passed
    through unchanged.
    """

    def format(self, record: logging.LogRecord) -> str:
        return record.getMessage()


def create_logger(
    component: str,
    level: int = logging.INFO
) -> StructuredLogger:
    """
    Factory function to create configured StructuredLogger.

    Args:
        component: Component identifier
        level: Logging level (default: INFO)

    Returns:
        Configured StructuredLogger instance

    Example:
        >>> logger = create_logger("control", level=logging.DEBUG)
    """
    return StructuredLogger(component=component, level=level)


def create_discard_logger(component: str = "control") -> StructuredLogger:
    """Logger that drops every record before it is serialized."""
    logger = StructuredLogger(
        component=component,
        level=logging.CRITICAL + 1,
        logger_name=DISCARD_LOGGER_NAME,
        handler=logging.NullHandler(),
    )
    logger.logger.propagate = False
    return logger


_default_lock = threading.Lock()
_default_logger: Optional[StructuredLogger] = None


def get_default_logger() -> StructuredLogger:
    """
    Process-wide sink used by control planes created without a logger.

    Discards everything until set_default_logger() is called.
    """
    global _default_logger
    with _default_lock:
        if _default_logger is None:
            _default_logger = create_discard_logger()
        return _default_logger


def set_default_logger(logger: Optional[StructuredLogger]) -> None:
    """Install the process-wide sink. Passing None restores the discarding one."""
    global _default_logger
    with _default_lock:
        _default_logger = logger
