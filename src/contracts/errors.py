# domain errors shared across packages
# src/contracts/errors.py
"""
Domain-level errors.

Faults in this module are meant to be caught at the tool boundary and turned
into structured error responses; none of them should take down the bot
connection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(eq=False)
class CommandExecutionError(RuntimeError):
    """
    Raised when issuing an actuator command fails.

    Examples:
        - the protocol client raised while sending the command
        - an attack target failed validation
    """

    command: str
    reason: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.reason


@dataclass(eq=False)
class UnknownCommandError(CommandExecutionError):
    """The bot has no command with this name."""

    def __str__(self) -> str:
        return f"Unknown bot command: {self.command!r}"


class MovementInProgressError(RuntimeError):
    """A movement run is already active on this controller."""


@dataclass(eq=False)
class PropertyLookupError(LookupError):
    """
    Raised when a dotted property path cannot be resolved on live bot state.

    Carries enough detail for the calling agent to self-correct: the failing
    segment, the part of the path resolved so far, and a sample of the keys
    that were available at that point.
    """

    path: str
    segment: str
    resolved_path: str
    reason: str
    available: List[str] = field(default_factory=list)
    truncated: bool = False

    def __str__(self) -> str:
        msg = self.reason
        if self.available:
            msg += f". Available properties: {', '.join(self.available)}"
            if self.truncated:
                msg += "..."
        return msg
