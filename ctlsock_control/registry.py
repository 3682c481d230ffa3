"""
HandlerRegistry - Explicit command registration pattern

Bounded Context: Command registration and lookup
Responsibilities:
  - Register named handlers with descriptions
  - Reject duplicate names (never overwrite)
  - Exact, case-sensitive lookup for the connection handlers
  - Provide introspection (names, describe, help listing)

Design Motivation:
  Problem: Silent overrides make it unclear which code answers a command
  Solution: Explicit registration, first registration wins, conflicts raise

Threading: Thread-safe (uses lock for write operations, reads are lock-free)
Pattern: Registry with explicit registration
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional
import threading

from .errors import HandlerExistsError

HandlerFunc = Callable[[List[str]], str]

HELP_BANNER = "Available commands:"


@dataclass(frozen=True)
class Handler:
    """
    Named command handler.

    Attributes:
        name: Command name, unique within a registry
        description: One-line text shown by `help` (may be empty)
        fn: Callable taking the argument list and returning the reply

    Example:
        >>> Handler("echo", "repeat the arguments", lambda args: " ".join(args))
    """
    name: str
    description: str
    fn: HandlerFunc

    def __post_init__(self):
        """Validate handler record."""
        if not self.name:
            raise ValueError("handler name cannot be empty")
        if "\x00" in self.name:
            raise ValueError(f"handler name {self.name!r} must not contain NUL")
        if not callable(self.fn):
            raise TypeError(f"handler '{self.name}' function is not callable")

    def run(self, args: List[str]) -> str:
        """Invoke the handler function."""
        return self.fn(args)


class HandlerRegistry:
    """
    Registry of command handlers with explicit registration.

    Key Features:
      - Fail-fast: Duplicate names rejected with HandlerExistsError
      - Transactional batches: register_many inserts all or nothing
      - Introspection: names, descriptions and the help listing

    Thread Safety:
      - Uses lock for write operations (register, register_many)
      - Read operations are lock-free (single dict reads)

    Example:
        registry = HandlerRegistry()
        registry.register('status', "report service status", status_handler)

        handler = registry.lookup('status')
        if handler is not None:
            reply = handler.run([])
    """

    def __init__(self, handlers: Iterable[Handler] = ()):
        self._handlers: Dict[str, Handler] = {}
        self._lock = threading.Lock()
        self.register_many(handlers)

    def register(self, name: str, description: str, fn: HandlerFunc) -> Handler:
        """
        Register a command with its handler function.

        Args:
            name: Command name (case-sensitive, no NUL)
            description: Human-readable description for help text
            fn: Callable taking List[str] and returning str

        Returns:
            The registered Handler record

        Raises:
            HandlerExistsError: If the name is already registered
            ValueError: If the name is empty
        """
        handler = Handler(name=name, description=description, fn=fn)
        self.register_many([handler])
        return handler

    def register_many(self, handlers: Iterable[Handler]) -> None:
        """
        Register several handlers at once.

        All names are checked against the registry and against each other
        before anything is inserted, so a conflict leaves the registry
        unchanged.

        Raises:
            HandlerExistsError: Naming the first conflicting handler
        """
        batch = list(handlers)
        with self._lock:
            seen = set()
            for handler in batch:
                if handler.name in self._handlers or handler.name in seen:
                    raise HandlerExistsError(handler.name)
                seen.add(handler.name)

            for handler in batch:
                self._handlers[handler.name] = handler

    def lookup(self, name: str) -> Optional[Handler]:
        """
        Find the handler for a command name.

        Thread Safety: Read-only operation (no lock needed)
        """
        return self._handlers.get(name)

    def names(self) -> List[str]:
        """Sorted snapshot of registered command names."""
        return sorted(self._handlers)

    def describe(self) -> Dict[str, str]:
        """
        Get dict of commands with descriptions.

        Returns: Dict copy (snapshot)
        """
        return {name: h.description for name, h in list(self._handlers.items())}

    def render_help(self) -> str:
        """
        Help listing, sorted by command name.

        Format:
            Available commands:
            <blank line>
            \\t<name>\\t<description>
            ...
        """
        entries = sorted(self.describe().items())
        lines = [HELP_BANNER, ""]
        lines.extend(f"\t{name}\t{description}" for name, description in entries)
        return "\n".join(lines)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
