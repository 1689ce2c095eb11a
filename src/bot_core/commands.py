# src/bot_core/commands.py
"""
Generic bot command execution.

Translates one named command plus loosely-typed params (as sent by an
external agent) into actuator calls:

- setControlState(<direction>, <state>[, distance[, seconds]])
      -> supervised MovementController run
- attack(<entity id>)
      -> validated attack (target must exist and be within reach)
- anything else
      -> actuator.execute(), awaiting its completion

Failures are re-raised as CommandExecutionError so the tool surface can
report them. Outside movement runs (which clean up after themselves) a
failure also clears the bot's control state.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Any, List, Optional, Sequence

from contracts.bot_core import BotActuator
from contracts.errors import CommandExecutionError, MovementInProgressError
from contracts.types import Position
from env.schema import MovementConfig
from .movement import MovementController, MovementResult, is_movement_command
from .tracing import CommandTracer


log = logging.getLogger(__name__)

ATTACK_COMMAND = "attack"
DEFAULT_ATTACK_RANGE = 4.0


def coerce_params(params: Optional[Sequence[Any]]) -> List[Any]:
    """Turn "true"/"false" strings into booleans; leave everything else alone."""
    coerced: List[Any] = []
    for p in params or []:
        if p == "true":
            coerced.append(True)
        elif p == "false":
            coerced.append(False)
        else:
            coerced.append(p)
    return coerced


def _format_args(params: Sequence[Any]) -> str:
    return ", ".join(str(p) for p in params)


@dataclass
class CommandOutcome:
    """What a command did, in a form the tool surface can render."""

    command: str
    params: List[Any]
    message: str
    value: Any = None
    movement: Optional[MovementResult] = None


class CommandExecutor:
    """
    Route and execute a single bot command.

    Public contract:
      await execute(command, params) -> CommandOutcome
      raises CommandExecutionError (UnknownCommandError for bad names)
    """

    def __init__(
        self,
        actuator: BotActuator,
        movement: MovementController,
        *,
        tracer: Optional[CommandTracer] = None,
        attack_range: float = DEFAULT_ATTACK_RANGE,
    ) -> None:
        self._actuator = actuator
        self._movement = movement
        self._tracer = tracer or CommandTracer()
        self._attack_range = attack_range

    @property
    def tracer(self) -> CommandTracer:
        return self._tracer

    @property
    def movement_config(self) -> MovementConfig:
        return self._movement.config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def execute(self, command: str, params: Optional[Sequence[Any]] = None) -> CommandOutcome:
        parameters = coerce_params(params)
        log.debug("CommandExecutor.execute start command=%s params=%r", command, parameters)

        is_move = is_movement_command(command, parameters)
        start = perf_counter()
        try:
            if is_move:
                outcome = await self._execute_movement(command, parameters)
            elif command == ATTACK_COMMAND and parameters:
                outcome = self._execute_attack(command, parameters)
            else:
                outcome = await self._execute_direct(command, parameters)
        except Exception as exc:
            duration = perf_counter() - start
            # Movement runs clear their own control state; a rejected run
            # must not release the controls of the run in flight.
            if not is_move:
                self._clear_after_failure(command)
            self._tracer.record(
                command=command,
                params=parameters,
                success=False,
                error=str(exc) or repr(exc),
                duration_s=duration,
            )
            if isinstance(exc, CommandExecutionError):
                raise
            raise CommandExecutionError(
                command=command,
                reason=str(exc) or repr(exc),
                details={"params": parameters, "exception": repr(exc)},
            ) from exc

        self._tracer.record(
            command=command,
            params=parameters,
            success=True,
            error=None,
            duration_s=perf_counter() - start,
            stop_reason=outcome.movement.stop_reason.value if outcome.movement else None,
        )
        return outcome

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    async def _execute_movement(self, command: str, params: List[Any]) -> CommandOutcome:
        """
        setControlState(direction, state[, distance[, seconds]]).

        The third param is the target distance in blocks, the fourth the
        maximum duration in seconds.
        """
        target = float(params[2]) if len(params) >= 3 else None
        max_ms = float(params[3]) * 1000.0 if len(params) >= 4 else None

        try:
            result = await self._movement.run(command, params[:2], target, max_ms)
        except MovementInProgressError as exc:
            raise CommandExecutionError(command=command, reason=str(exc)) from exc
        return CommandOutcome(
            command=command,
            params=params,
            message=result.summary(),
            movement=result,
        )

    def _execute_attack(self, command: str, params: List[Any]) -> CommandOutcome:
        raw_id = params[0]
        try:
            entity_id = int(raw_id)
        except (TypeError, ValueError):
            raise CommandExecutionError(
                command=command,
                reason=f"Invalid entity ID: {raw_id}. Must be a number.",
            ) from None

        entity = self._actuator.find_entity(entity_id)
        if entity is None:
            raise CommandExecutionError(
                command=command,
                reason=f"Entity with ID {raw_id} not found",
            )

        target_pos = Position.from_mapping(entity.get("position") or {})
        distance = self._actuator.read_position().distance_to(target_pos)
        if distance > self._attack_range:
            raise CommandExecutionError(
                command=command,
                reason=(
                    f"Target too far ({distance:.2f} blocks). Must be within "
                    f"{self._attack_range:g} blocks to attack."
                ),
                details={"distance": distance},
            )

        self._actuator.execute(command, [entity_id]).discard()
        name = entity.get("name") or entity.get("type")
        return CommandOutcome(
            command=command,
            params=params,
            message=f"Attacked entity {entity_id} ({name}) at distance {distance:.2f} blocks",
        )

    async def _execute_direct(self, command: str, params: List[Any]) -> CommandOutcome:
        completion = self._actuator.execute(command, params)
        value = await completion.wait()
        return CommandOutcome(
            command=command,
            params=params,
            message=f"Executed: bot.{command}({_format_args(params)}). Result: {_render(value)}",
            value=value,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _clear_after_failure(self, command: str) -> None:
        try:
            self._actuator.clear_control_states()
        except Exception:
            log.exception("clear_control_states failed after %s error", command)


def _render(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return repr(value)
