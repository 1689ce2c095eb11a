# time-bounded, self-correcting movement runs
# src/bot_core/movement.py
"""
Polling movement controller.

One run = one actuator command (e.g. setControlState("forward", True))
supervised by a sampling loop over the live position:

    - sample every `sample_interval_ms`
    - stop when the bot has moved `target_distance` from where it started
    - stop when it has not moved more than `stuck_movement_threshold` per
      sample for `stuck_threshold_ms` (stuck / blocked)
    - stop when `max_duration_ms` has elapsed

Control state is always cleared afterwards, on every exit path including
exceptions and task cancellation.

Distance is plain 3-D Euclidean displacement from the start position. This
is dead reckoning, not path tracking; real navigation goes through
BotActuator.navigate_to().
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from contracts.bot_core import BotActuator
from contracts.errors import CommandExecutionError, MovementInProgressError
from contracts.types import Position
from env.schema import MovementConfig
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event


log = logging.getLogger(__name__)

MOVEMENT_COMMAND = "setControlState"
MOVEMENT_DIRECTIONS = ("forward", "back", "left", "right", "jump", "sneak", "sprint")


def is_movement_command(command: str, args: Sequence[Any]) -> bool:
    """True for setControlState(<direction>, <state>, ...) calls."""
    if command != MOVEMENT_COMMAND or len(args) < 2:
        return False
    return args[0] in MOVEMENT_DIRECTIONS


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class StopReason(str, Enum):
    REACHED_TARGET = "reached target"
    STUCK = "stuck/blocked"
    TIMEOUT = "timeout"
    # Not expected with correct sampling, but must be representable.
    UNKNOWN = "unknown"


def classify_stop(
    *,
    final_distance: float,
    target_distance: float,
    stuck_ms: float,
    elapsed_ms: float,
    config: MovementConfig,
    max_duration_ms: float,
) -> StopReason:
    """Classify why a run stopped. Precedence: reached > stuck > timeout."""
    if final_distance >= target_distance - config.reached_tolerance:
        return StopReason.REACHED_TARGET
    if stuck_ms >= config.stuck_threshold_ms:
        return StopReason.STUCK
    if elapsed_ms >= max_duration_ms:
        return StopReason.TIMEOUT
    return StopReason.UNKNOWN


@dataclass
class MovementResult:
    command: str
    direction_args: list
    final_position: Position
    actual_distance: float
    target_distance: float
    stop_reason: StopReason
    elapsed_ms: float
    samples: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "command": self.command,
            "directionArgs": list(self.direction_args),
            "finalPosition": self.final_position.to_dict(),
            "actualDistance": self.actual_distance,
            "targetDistance": self.target_distance,
            "stopReason": self.stop_reason.value,
            "elapsedMs": self.elapsed_ms,
            "samples": self.samples,
        }

    def summary(self) -> str:
        args = ", ".join(str(a) for a in self.direction_args)
        return (
            f"Executed: bot.{self.command}({args}) for {self.actual_distance:.2f} blocks "
            f"(target: {self.target_distance}, {self.stop_reason.value}). "
            f"Position: {self.final_position.floored()}"
        )


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class MovementController:
    """
    Runs one supervised movement at a time against a single actuator.

    A second run started while one is in flight is rejected with
    MovementInProgressError; callers that want to redirect the bot should
    cancel the running task first.

    `clock` returns seconds and `sleep` takes seconds; both are injectable so
    tests can drive the loop with a fake clock.
    """

    def __init__(
        self,
        actuator: BotActuator,
        *,
        config: Optional[MovementConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._actuator = actuator
        self._cfg = config if config is not None else MovementConfig()
        self._clock = clock
        self._sleep = sleep
        self._bus = bus
        self._in_flight = False

    @property
    def config(self) -> MovementConfig:
        return self._cfg

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def run(
        self,
        command: str,
        direction_args: Sequence[Any],
        target_distance: Optional[float] = None,
        max_duration_ms: Optional[float] = None,
    ) -> MovementResult:
        """
        Issue `command(*direction_args)` once and supervise it until the
        target distance is reached, the bot is stuck, or time runs out.

        Raises:
            ValueError: non-positive target distance or duration.
            MovementInProgressError: another run is active.
            CommandExecutionError: issuing the command failed (control
                state is still cleared).
        """
        cfg = self._cfg
        target = cfg.default_target_distance if target_distance is None else float(target_distance)
        max_ms = cfg.default_max_duration_ms if max_duration_ms is None else float(max_duration_ms)
        if target <= 0:
            raise ValueError(f"target_distance must be > 0, got {target}")
        if max_ms <= 0:
            raise ValueError(f"max_duration_ms must be > 0, got {max_ms}")

        if self._in_flight:
            raise MovementInProgressError(
                "A movement run is already in progress; wait for it or cancel it first."
            )
        args = list(direction_args)
        run_id = uuid.uuid4().hex[:12]
        self._in_flight = True

        self._publish(
            EventType.MOVEMENT_STARTED,
            f"Movement {command}({args}) started",
            {"command": command, "args": args, "target_distance": target, "max_duration_ms": max_ms},
            run_id,
        )

        stuck_ms = 0.0
        samples = 0
        try:
            try:
                start = self._actuator.read_position()
                started_at = self._clock()
                self._issue(command, args)

                current_distance = 0.0
                last_pos = start
                interval_s = cfg.sample_interval_ms / 1000.0

                while (
                    self._elapsed_ms(started_at) < max_ms
                    and current_distance < target
                ):
                    await self._sleep(interval_s)
                    current = self._actuator.read_position()
                    samples += 1
                    current_distance = start.distance_to(current)

                    if last_pos.distance_to(current) < cfg.stuck_movement_threshold:
                        stuck_ms += cfg.sample_interval_ms
                        if stuck_ms >= cfg.stuck_threshold_ms:
                            break
                    else:
                        stuck_ms = 0.0
                        last_pos = current
            finally:
                self._actuator.clear_control_states()

            final = self._actuator.read_position()
            elapsed = self._elapsed_ms(started_at)
        finally:
            self._in_flight = False

        actual = start.distance_to(final)
        reason = classify_stop(
            final_distance=actual,
            target_distance=target,
            stuck_ms=stuck_ms,
            elapsed_ms=elapsed,
            config=cfg,
            max_duration_ms=max_ms,
        )
        result = MovementResult(
            command=command,
            direction_args=args,
            final_position=final,
            actual_distance=actual,
            target_distance=target,
            stop_reason=reason,
            elapsed_ms=elapsed,
            samples=samples,
        )

        log.info(
            "movement run=%s command=%s args=%r distance=%.2f target=%.2f reason=%s "
            "elapsed=%.0fms samples=%d",
            run_id,
            command,
            args,
            actual,
            target,
            reason.value,
            elapsed,
            samples,
        )
        self._publish(EventType.MOVEMENT_FINISHED, result.summary(), result.to_dict(), run_id)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _issue(self, command: str, args: list) -> None:
        """Issue the command once; the completion is not awaited."""
        try:
            completion = self._actuator.execute(command, args)
        except CommandExecutionError:
            raise
        except Exception as exc:
            raise CommandExecutionError(
                command=command,
                reason=f"Failed to issue {command}: {exc}",
                details={"args": args, "exception": repr(exc)},
            ) from exc
        completion.discard()

    def _elapsed_ms(self, started_at: float) -> float:
        return (self._clock() - started_at) * 1000.0

    def _publish(
        self,
        event_type: EventType,
        message: str,
        payload: Dict[str, Any],
        run_id: str,
    ) -> None:
        if self._bus is None:
            return
        log_event(
            bus=self._bus,
            module="bot_core.movement",
            event_type=event_type,
            message=message,
            payload=payload,
            correlation_id=run_id,
        )
