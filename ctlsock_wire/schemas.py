"""
Command Message Schema
======================

Bounded Context: Wire Protocol

A command message is an ordered sequence of UTF-8 fields. Field 0 is the
command name, the remaining fields are positional arguments. On the wire the
fields are joined by NUL into a single frame payload.

Invariants:
    - Parsing always yields a name (an empty payload gives name == "")
    - Arguments never contain the separator

Example:
    >>> msg = CommandMessage.from_payload(b"foo\\x00bar\\x00baz")
    >>> msg.name, msg.args
    ('foo', ('bar', 'baz'))
    >>> msg.to_payload()
    b'foo\\x00bar\\x00baz'
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

SEPARATOR = "\x00"
ENCODING = "utf-8"


@dataclass(frozen=True)
class CommandMessage:
    """
    Immutable command request.

    Attributes:
        name: Command name (may be empty, which simply fails lookup)
        args: Positional arguments
    """
    name: str
    args: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate invariants."""
        if SEPARATOR in self.name:
            raise ValueError("command name must not contain NUL")
        for arg in self.args:
            if SEPARATOR in arg:
                raise ValueError(f"argument {arg!r} must not contain NUL")

    @classmethod
    def build(cls, name: str, args: Sequence[str] = ()) -> 'CommandMessage':
        """Create a message from any sequence of arguments."""
        return cls(name=name, args=tuple(args))

    def to_payload(self) -> bytes:
        """Serialize to a frame payload."""
        return SEPARATOR.join((self.name,) + self.args).encode(ENCODING)

    @classmethod
    def from_payload(cls, payload: bytes) -> 'CommandMessage':
        """
        Deserialize from a frame payload.

        Undecodable bytes are replaced rather than rejected so that a garbled
        request still gets a textual reply.
        """
        fields = payload.decode(ENCODING, errors="replace").split(SEPARATOR)
        return cls(name=fields[0], args=tuple(fields[1:]))


def unknown_command_reply(name: str) -> str:
    """Reply text for a command that is not registered."""
    return f"ERROR: unknown command: '{name}'."


def command_failed_reply(name: str, error: BaseException) -> str:
    """Reply text for a handler that raised."""
    return f"ERROR: command '{name}' failed: {error}."


def reply_too_large(size: int) -> str:
    """Reply text for a handler reply that does not fit in one frame."""
    return f"ERROR: reply too large ({size} bytes)."
