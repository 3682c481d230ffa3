#!/usr/bin/env python3
"""
Control Endpoint - Entry Point
==============================

This script starts a standalone ctlsock control endpoint, which:
- Binds a Unix socket at the configured path
- Refuses to start if another instance already answers there
- Serves the built-in commands (ping, pid, help)
- Serves sample host commands (echo, uptime)

Usage:
    python run_control_endpoint.py --config config/control.yaml

    # In another terminal
    ctlsock-cli --config config/control.yaml help

Lifecycle:
    1. Load configuration from YAML
    2. Setup logging (console + file)
    3. Create control plane and register host commands
    4. Start control plane (non-blocking)
    5. Wait for stop signal (Ctrl+C or SIGTERM)
    6. Graceful shutdown

Signals:
    - SIGTERM: Graceful shutdown
    - SIGINT (Ctrl+C): Graceful shutdown
"""

import argparse
import logging
import signal
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional

from ctlsock_control import AlreadyRunningError, ControlConfig, ControlPlane, ListenError
from ctlsock_wire.logging import StructuredLogger


# ─────────────────────────────────────────────────────────────────────────────
# Logging Setup
# ─────────────────────────────────────────────────────────────────────────────

def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Setup logging for the endpoint.

    Args:
        level: Root log level name
        log_file: Optional path to log file

    Returns:
        Logger instance for the entry point
    """
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            *(
                [logging.FileHandler(log_file)]
                if log_file
                else []
            )
        ]
    )

    return logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Main Service
# ─────────────────────────────────────────────────────────────────────────────

class ControlApp:
    """
    Application wrapper for a standalone ControlPlane.

    Handles:
    - Configuration loading
    - Host command registration
    - Signal handling (SIGTERM, SIGINT)
    - Graceful shutdown
    """

    def __init__(self, config_path: Path, log_file: Optional[Path] = None, use_log_file: bool = True):
        self.config_path = config_path
        self.config = ControlConfig.from_yaml(config_path)

        if use_log_file:
            log_file = log_file or self.config.log_file
        else:
            log_file = None
        self.logger = setup_logging(self.config.log_level, log_file)

        self.control_plane: Optional[ControlPlane] = None
        self._started_at = time.monotonic()
        self._stop_event = threading.Event()
        self._shutdown_requested = False

    def setup(self):
        """Create the control plane and register host commands."""
        self.logger.info("=" * 80)
        self.logger.info("🚀 ctlsock Control Endpoint - Starting")
        self.logger.info("=" * 80)
        self.logger.info(f"📄 Configuration: {self.config_path}")

        # Structured records go through the root handlers configured above
        control_logger = StructuredLogger(
            component="control",
            level=getattr(logging, self.config.log_level),
            handler=logging.NullHandler(),
        )
        self.control_plane = ControlPlane.from_config(self.config, logger=control_logger)

        self.control_plane.register("echo", "repeat the arguments", self._echo)
        self.control_plane.register("uptime", "seconds since the endpoint started", self._uptime)
        self.logger.info(f"✅ Commands: {', '.join(self.control_plane.registry.names())}")

    def run(self) -> int:
        """
        Run the control endpoint.

        Blocks until shutdown is requested. Returns the process exit code.
        """
        if not self.control_plane:
            raise RuntimeError("Control plane not initialized. Call setup() first.")

        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        try:
            self.control_plane.start()
        except AlreadyRunningError as e:
            self.logger.error(f"❌ {e}")
            return 1
        except ListenError as e:
            self.logger.error(f"❌ {e}")
            return 1

        self.logger.info(f"✅ Listening on {self.control_plane.socket_path}")
        self.logger.info("Press Ctrl+C to stop")
        self.logger.info("=" * 80)

        self._stop_event.wait()
        self.shutdown()
        return 0

    def shutdown(self):
        """Graceful shutdown of the control plane."""
        if self._shutdown_requested:
            self.logger.warning("⚠️  Shutdown already in progress")
            return

        self._shutdown_requested = True
        self.logger.info("🛑 Shutting down control endpoint")

        if self.control_plane:
            self.control_plane.stop()
            self.logger.info("✅ Control plane stopped")

    def _echo(self, args: List[str]) -> str:
        return " ".join(args)

    def _uptime(self, args: List[str]) -> str:
        return str(int(time.monotonic() - self._started_at))

    def _signal_handler(self, signum, frame):
        signal_name = signal.Signals(signum).name
        self.logger.info(f"⚠️  Received signal {signal_name} ({signum})")
        self._stop_event.set()


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def parse_args():
    parser = argparse.ArgumentParser(
        description="ctlsock Control Endpoint - local Unix socket command server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start with default config
  python run_control_endpoint.py --config config/control.yaml

  # Start with custom log file
  python run_control_endpoint.py --config config/control.yaml --log-file logs/custom.log

  # Console only
  python run_control_endpoint.py --config config/control.yaml --no-log-file
        """
    )

    parser.add_argument(
        '--config',
        type=Path,
        required=True,
        help='Path to control endpoint configuration YAML file'
    )

    parser.add_argument(
        '--log-file',
        type=Path,
        default=None,
        help='Path to log file (default: log_file from config)'
    )

    parser.add_argument(
        '--no-log-file',
        action='store_true',
        help='Disable file logging (console only)'
    )

    return parser.parse_args()


def main():
    args = parse_args()

    if not args.config.exists():
        print(f"❌ Error: Configuration file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    try:
        app = ControlApp(
            config_path=args.config,
            log_file=args.log_file,
            use_log_file=not args.no_log_file,
        )
        app.setup()
        sys.exit(app.run())
    except ValueError as e:
        print(f"❌ Fatal error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
