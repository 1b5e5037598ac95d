"""
Command Dataclasses

A Command is one decoded inbound datagram. It lives for a single
dispatch cycle.
"""

from dataclasses import dataclass
from enum import Enum


class Verb(str, Enum):
    """Recognized command verbs (case-sensitive)"""
    EXIT = "EXIT"
    UNHEALTHY = "UNHEALTHY"


class DispatcherState(str, Enum):
    """Control loop states"""
    RUNNING = "running"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class Command:
    """Decoded inbound message"""
    verb: str
    raw_text: str
    sender: tuple

    @classmethod
    def from_text(cls, text: str, sender: tuple) -> "Command":
        """Build a Command from trimmed text; empty text gives an empty verb"""
        raw_text = text.strip()
        parts = raw_text.split()
        verb = parts[0] if parts else ""
        return cls(verb=verb, raw_text=raw_text, sender=sender)

    @property
    def known_verb(self) -> Verb | None:
        try:
            return Verb(self.verb)
        except ValueError:
            return None
