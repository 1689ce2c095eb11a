# contracts package
# src/contracts/__init__.py
"""
Shared boundary types and interfaces.

Everything outside this package talks to the bot, the reaction handlers and
the decision model only through the Protocols defined here.
"""

from __future__ import annotations

from .types import CommandCompletion, Event, Position
from .errors import (
    CommandExecutionError,
    MovementInProgressError,
    PropertyLookupError,
    UnknownCommandError,
)
from .bot_core import BotActuator, BotEventHandler, BotEventSource
from .reactions import ReactionHandler, ReactionKind
from .llm import DecisionBackend

__all__ = [
    "Position",
    "CommandCompletion",
    "Event",
    "CommandExecutionError",
    "UnknownCommandError",
    "MovementInProgressError",
    "PropertyLookupError",
    "BotActuator",
    "BotEventHandler",
    "BotEventSource",
    "ReactionHandler",
    "ReactionKind",
    "DecisionBackend",
]
