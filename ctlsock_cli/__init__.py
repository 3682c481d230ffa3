"""
ctlsock CLI - Command-line interface for control endpoints.

This package provides a thin client that connects to a ControlPlane socket,
sends one command, prints the reply, and exits.

Usage:
    ctlsock-cli -f /run/myapp/control.sock ping
    ctlsock-cli -f /run/myapp/control.sock pid
    ctlsock-cli -f /run/myapp/control.sock help
    ctlsock-cli --config config/control.yaml echo hello world
"""

__version__ = "1.0.0"
