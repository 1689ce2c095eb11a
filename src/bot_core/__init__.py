# bot_core package
# src/bot_core/__init__.py
"""
bot_core package.

Exports:
    - MovementController: supervised, time-bounded movement runs
    - CommandExecutor: generic command routing (movement / attack / direct)
    - BotStateInspector: allow-listed read access to live bot state
    - CommandTracer: rolling command trace buffer
"""

from __future__ import annotations

from .movement import (
    MovementController,
    MovementResult,
    StopReason,
    classify_stop,
    is_movement_command,
)
from .commands import CommandExecutor, CommandOutcome, coerce_params
from .introspection import BotStateInspector
from .tracing import CommandTracer, CommandTraceRecord

__all__ = [
    "MovementController",
    "MovementResult",
    "StopReason",
    "classify_stop",
    "is_movement_command",
    "CommandExecutor",
    "CommandOutcome",
    "coerce_params",
    "BotStateInspector",
    "CommandTracer",
    "CommandTraceRecord",
]
