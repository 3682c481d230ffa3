"""
ctlsock CLI - Main entry point.

Sends one command to a control endpoint, prints the reply, and exits.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ctlsock_control.config import ControlConfig

from .socket_client import SocketCommandClient


def resolve_socket_path(args: argparse.Namespace) -> Optional[Path]:
    """
    Socket path from -f, falling back to a ControlConfig YAML.

    Raises:
        FileNotFoundError: If --config points to a missing file
        ValueError: If the config is invalid
    """
    if args.socket:
        return Path(args.socket)
    if args.config:
        if not args.config.exists():
            raise FileNotFoundError(f"Config file not found: {args.config}")
        return ControlConfig.from_yaml(args.config).socket_path
    return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctlsock-cli",
        description="ctlsock CLI - Send a command to a running process",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Liveness check
  ctlsock-cli -f /run/myapp/control.sock ping

  # List available commands
  ctlsock-cli -f /run/myapp/control.sock help

  # Command with arguments (sent NUL-separated)
  ctlsock-cli -f /run/myapp/control.sock echo hello world

  # Socket path from the service config
  ctlsock-cli --config config/control.yaml pid
"""
    )

    parser.add_argument(
        "-f", "--socket",
        default=None,
        help="Socket path for sending commands (required unless --config is given)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Control endpoint YAML config to read socket_path from"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Seconds to wait for a reply (default: 5)"
    )
    parser.add_argument("command", nargs="?", help="Command name")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Command arguments")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        socket_path = resolve_socket_path(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    if socket_path is None:
        parser.print_usage(sys.stderr)
        return 1

    client = SocketCommandClient(socket_path, timeout=args.timeout)

    try:
        reply = client.send_command(args.command or "", args.args)
    except (ConnectionError, RuntimeError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        return 1

    # An empty reply still prints a line.
    print(reply)
    return 0


if __name__ == '__main__':
    sys.exit(main())
