"""
Built-in commands present in every control plane.

    ping  liveness check, always "pong"
    pid   decimal process id of the serving process
    help  sorted listing of every registered command
"""

import os
from typing import List

from .registry import Handler, HandlerRegistry


def ping(args: List[str]) -> str:
    return "pong"


def pid(args: List[str]) -> str:
    # Evaluated per call so forked children report their own pid.
    return str(os.getpid())


BUILTIN_HANDLERS = (
    Handler("ping", "checks whether the connection is working", ping),
    Handler("pid", "return the Unix process ID of this program", pid),
)

HELP_NAME = "help"
HELP_DESCRIPTION = "show this message"


def builtin_registry() -> HandlerRegistry:
    """
    Fresh registry seeded with the built-in commands.

    `help` is bound to the registry it lists, so host handlers registered
    later show up in its output.
    """
    registry = HandlerRegistry(BUILTIN_HANDLERS)
    registry.register(HELP_NAME, HELP_DESCRIPTION, lambda args: registry.render_help())
    return registry
