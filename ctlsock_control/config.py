"""
Configuration schema for a control endpoint.

This module defines the settings a host needs to run a ControlPlane:
socket location, probe timeout, accept polling and logging.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union
import yaml

from .probe import PROBE_TIMEOUT

# sockaddr_un.sun_path is 108 bytes on Linux including the trailing NUL.
MAX_SOCKET_PATH_BYTES = 107

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class ControlConfig:
    """
    Control endpoint configuration.

    Loaded from YAML and validated at construction.
    Immutable after construction (frozen dataclass).
    """

    socket_path: Path
    probe_timeout: float = PROBE_TIMEOUT
    poll_interval: float = 0.2
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        """Validate control configuration."""
        if not str(self.socket_path):
            raise ValueError("socket_path cannot be empty")

        path_bytes = len(str(self.socket_path).encode("utf-8"))
        if path_bytes > MAX_SOCKET_PATH_BYTES:
            raise ValueError(
                f"socket_path too long for a Unix socket "
                f"({path_bytes} bytes, max {MAX_SOCKET_PATH_BYTES}): {self.socket_path}"
            )

        if not 0.0 < self.probe_timeout <= 10.0:
            raise ValueError(
                f"probe_timeout must be in (0, 10] seconds, got {self.probe_timeout}"
            )

        if not 0.0 < self.poll_interval <= 5.0:
            raise ValueError(
                f"poll_interval must be in (0, 5] seconds, got {self.poll_interval}"
            )

        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of {sorted(LOG_LEVELS)}"
            )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "ControlConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            socket_path: "/run/myapp/control.sock"
            probe_timeout: 0.1
            poll_interval: 0.2
            log_level: "INFO"
            log_file: "logs/control.log"
        """
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping: {yaml_path}")
        if "socket_path" not in data:
            raise ValueError(f"socket_path missing from {yaml_path}")

        log_file = data.get("log_file")

        return cls(
            socket_path=Path(data["socket_path"]),
            probe_timeout=float(data.get("probe_timeout", PROBE_TIMEOUT)),
            poll_interval=float(data.get("poll_interval", 0.2)),
            log_level=str(data.get("log_level", "INFO")).upper(),
            log_file=Path(log_file) if log_file else None,
        )
