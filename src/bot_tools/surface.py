# src/bot_tools/surface.py
"""
Tool-exposure surface for an external agent.

Every operation returns a ToolResponse: one text content block plus an
isError flag. Faults are turned into error responses here and never raised
to the caller, so whatever hosts these tools (an RPC server, a chat loop)
only ever has to forward the structured result.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from bot_core.commands import CommandExecutor, CommandOutcome
from bot_core.introspection import BotStateInspector
from contracts.bot_core import BotActuator
from contracts.errors import PropertyLookupError
from events.buffer import EventBuffer
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event


log = logging.getLogger(__name__)

JsonDict = Dict[str, Any]


# ============================================================
# Responses
# ============================================================

@dataclass(frozen=True)
class ToolResponse:
    """Structured text result of one tool call."""

    text: str
    is_error: bool = False

    def to_dict(self) -> JsonDict:
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


def create_response(text: str) -> ToolResponse:
    return ToolResponse(text=text)


def create_error_response(exc: BaseException) -> ToolResponse:
    message = str(exc) or repr(exc)
    return ToolResponse(text=f"Error: {message}", is_error=True)


def _dumps(value: Any) -> str:
    return json.dumps(value, indent=2, default=repr)


# ============================================================
# Surface
# ============================================================

class BotToolSurface:
    """
    Outward boundary of the bot: events, commands, movement, inspection.

    All methods return ToolResponse; none of them raise.
    """

    def __init__(
        self,
        buffer: EventBuffer,
        executor: CommandExecutor,
        inspector: BotStateInspector,
        actuator: BotActuator,
        *,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._buffer = buffer
        self._executor = executor
        self._inspector = inspector
        self._actuator = actuator
        self._bus = bus

    # --------------------------------------------------------
    # Events
    # --------------------------------------------------------

    def get_recent_events(
        self,
        since: float = 0,
        limit: Optional[int] = 10,
        category: Optional[str] = None,
        event_types: Optional[Iterable[str]] = None,
    ) -> ToolResponse:
        try:
            events = self._buffer.query(
                category=category,
                since=since,
                limit=limit,
                event_types=event_types,
            )
            return create_response(_dumps([e.to_dict() for e in events]))
        except Exception as exc:
            log.exception("get_recent_events failed")
            return create_error_response(exc)

    def get_event_stats(self) -> ToolResponse:
        try:
            return create_response(_dumps(self._buffer.stats().to_dict()))
        except Exception as exc:
            log.exception("get_event_stats failed")
            return create_error_response(exc)

    # --------------------------------------------------------
    # Commands
    # --------------------------------------------------------

    async def execute_bot_command(
        self,
        command: str,
        params: Optional[Sequence[Any]] = None,
    ) -> ToolResponse:
        try:
            outcome = await self._execute(command, params)
        except Exception as exc:
            return create_error_response(exc)
        return create_response(outcome.message)

    async def run_movement(
        self,
        command: str,
        direction_args: Sequence[Any],
        target_distance: Optional[float] = None,
        max_duration_ms: Optional[float] = None,
    ) -> ToolResponse:
        """
        Explicit form of a movement command with named limits.

        Only the first two direction args (control, state) are used. The
        response is the run summary followed by the MovementResult as JSON
        (finalPosition, actualDistance, targetDistance, stopReason, ...).
        """
        params: List[Any] = list(direction_args[:2])
        if target_distance is not None or max_duration_ms is not None:
            params.append(
                target_distance
                if target_distance is not None
                else self._default_target_distance()
            )
        if max_duration_ms is not None:
            # setControlState takes its duration in seconds.
            params.append(max_duration_ms / 1000.0)

        try:
            outcome = await self._execute(command, params)
        except Exception as exc:
            return create_error_response(exc)
        if outcome.movement is None:
            return create_response(outcome.message)
        return create_response(f"{outcome.message}\n{_dumps(outcome.movement.to_dict())}")

    # --------------------------------------------------------
    # Inspection
    # --------------------------------------------------------

    def inspect_bot_property(self, prop: str) -> ToolResponse:
        try:
            value = self._inspector.inspect(prop)
            return create_response(f"Property '{prop}': {_dumps(value)}")
        except PropertyLookupError as exc:
            return create_error_response(
                RuntimeError(f"Failed to inspect property '{prop}': {exc}")
            )
        except Exception as exc:
            log.exception("inspect_bot_property failed for %s", prop)
            return create_error_response(
                RuntimeError(f"Failed to inspect property '{prop}': {exc}")
            )

    def get_bot_status(self) -> ToolResponse:
        try:
            return create_response(_dumps(self._inspector.status()))
        except Exception as exc:
            log.exception("get_bot_status failed")
            return create_error_response(exc)

    # --------------------------------------------------------
    # Navigation
    # --------------------------------------------------------

    def pathfind_to_position(
        self,
        x: float,
        y: float,
        z: float,
        range: float = 0,  # noqa: A002 - tool parameter name
    ) -> ToolResponse:
        try:
            self._actuator.navigate_to(x, y, z, range_=range)
        except Exception as exc:
            log.exception("pathfind_to_position failed")
            return create_error_response(exc)
        suffix = f" within {range:g} blocks" if range > 0 else " exactly"
        return create_response(f"Started pathfinding to ({x:g}, {y:g}, {z:g}){suffix}")

    # --------------------------------------------------------
    # Internal helpers
    # --------------------------------------------------------

    def _default_target_distance(self) -> float:
        return self._executor.movement_config.default_target_distance

    async def _execute(self, command: str, params: Optional[Sequence[Any]]) -> CommandOutcome:
        """Run one command and publish its outcome; failures are re-raised."""
        try:
            outcome = await self._executor.execute(command, params)
        except Exception as exc:
            self._publish_failure(command, params, exc)
            raise

        payload: JsonDict = {"command": command, "params": outcome.params}
        if outcome.movement is not None:
            payload["movement"] = outcome.movement.to_dict()
        self._publish(EventType.COMMAND_EXECUTED, outcome.message, payload)
        return outcome

    def _publish_failure(
        self,
        command: str,
        params: Optional[Sequence[Any]],
        exc: BaseException,
    ) -> None:
        log.warning("Command %s failed: %s", command, exc)
        self._publish(
            EventType.COMMAND_FAILED,
            f"Command {command} failed",
            {
                "command": command,
                "params": list(params or []),
                "error": str(exc) or repr(exc),
            },
        )

    def _publish(self, event_type: EventType, message: str, payload: JsonDict) -> None:
        if self._bus is None:
            return
        log_event(
            bus=self._bus,
            module="bot_tools.surface",
            event_type=event_type,
            message=message,
            payload=payload,
        )
