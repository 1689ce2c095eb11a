# path: src/monitoring/events.py
"""
Event schemas for the monitoring layer.

This module defines:
- EventType enum
- MonitoringEvent (structured runtime events)

All events are JSON-serializable via `.to_dict()` and are intended
for use with monitoring.bus.EventBus and monitoring.logger.JsonFileLogger.

MonitoringEvents describe what the agent runtime itself did (admitted an
event, ran a reaction, finished a movement run). They are distinct from
the observed game events held in events.buffer.EventBuffer.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted throughout the agent runtime."""

    # A game event entered the buffer
    EVENT_ADMITTED = auto()

    # Reaction dispatch
    REACTION_TRIGGERED = auto()
    REACTION_FAILED = auto()

    # Movement runs
    MOVEMENT_STARTED = auto()
    MOVEMENT_FINISHED = auto()

    # Generic command execution through the tool surface
    COMMAND_EXECUTED = auto()
    COMMAND_FAILED = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the buffer, dispatcher, movement controller
    or tool surface.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module string ("events.reactions", "bot_core.movement", ...)
    event_type: EventType       # Enum describing the event class
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data
    correlation_id: Optional[str] = None  # Groups events of one movement run / command

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
