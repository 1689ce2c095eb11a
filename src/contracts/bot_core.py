# BotActuator / BotEventSource interface definitions
# src/contracts/bot_core.py

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, Sequence

from .types import CommandCompletion, Position


# Handlers receive a normalized mapping describing one raw bot event.
BotEventHandler = Callable[[Mapping[str, Any]], None]


class BotActuator(Protocol):
    """Abstract command/readback surface of a live, network-controlled bot.

    This is the boundary with the game-protocol client:
    - emits commands (setControlState, chat, attack, ...)
    - reports live position / health / inventory
    - owns the navigation capability (pathfinding is not done here)
    """

    def execute(self, command: str, args: Sequence[Any]) -> CommandCompletion:
        """
        Issue a named command with positional arguments.

        Must raise UnknownCommandError for names the bot does not support
        rather than crashing the connection.
        """
        ...

    def read_position(self) -> Position:
        """Return the current live position."""
        ...

    def read_health(self) -> float:
        """Return the current live health."""
        ...

    def read_state(self) -> Mapping[str, Any]:
        """
        Return a read-only mapping of live bot state.

        Expected top-level keys: position, health, food, inventory,
        quick_bar_slot, held_item, username, entities.
        """
        ...

    def find_entity(self, entity_id: int) -> Optional[Mapping[str, Any]]:
        """Return the tracked entity with this id, if any."""
        ...

    def clear_control_states(self) -> None:
        """Release every held control. Idempotent."""
        ...

    def navigate_to(self, x: float, y: float, z: float, range_: float = 0.0) -> None:
        """Hand a goal to the external navigation capability."""
        ...


class BotEventSource(Protocol):
    """Source of raw bot events (chat, health, entitySpawn, ...)."""

    def on_event(self, name: str, handler: BotEventHandler) -> None:
        """Register a handler for raw events of the given name."""
        ...
