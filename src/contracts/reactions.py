# ReactionHandler interface definition
# src/contracts/reactions.py

from __future__ import annotations

from enum import Enum
from typing import Optional, Protocol

from .bot_core import BotActuator
from .types import Event


class ReactionKind(str, Enum):
    """Reactions the dispatcher can request for a qualifying event."""

    SPECIAL_CHAT = "specialChat"
    LOW_HEALTH = "lowHealth"
    HOSTILE_MOB = "hostileMobNearby"


class ReactionHandler(Protocol):
    """
    Side-effecting response to a qualifying event.

    Supplied to the dispatcher at construction. Called synchronously from
    inside event admission, so implementations should return quickly.
    """

    def react(
        self,
        kind: ReactionKind,
        event: Event,
        actuator: Optional[BotActuator],
    ) -> None:
        ...
