#tests/test_movement_controller.py
"""
Tests for bot_core.movement.MovementController

All runs use FakeClock, so sampling is deterministic and instant.

Covers:
- Reached target / stuck / timeout classification and precedence
- clear_control_states() called exactly once on every exit path
  (normal, mid-loop failure, issue failure, cancellation)
- Concurrent run rejected with MovementInProgressError
- Input validation
- Discarded completions stay referenced until they finish
- Result shape, summary text and monitoring events
"""

from __future__ import annotations

import asyncio
from typing import List

import pytest

from bot_core.movement import (
    MovementController,
    StopReason,
    classify_stop,
    is_movement_command,
)
from bot_core.testing.fakes import FakeBot, FakeClock
from contracts.errors import CommandExecutionError, MovementInProgressError
from contracts.types import _DISCARDED, CommandCompletion, Position
from env.schema import MovementConfig
from monitoring.events import EventType


def line(step: float, count: int) -> List[Position]:
    return [Position(step * i, 64.0, 0.0) for i in range(count)]


def make_controller(bot: FakeBot, **kwargs):
    clock = FakeClock()
    controller = MovementController(bot, clock=clock, sleep=clock.sleep, **kwargs)
    return controller, clock


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def test_is_movement_command():
    assert is_movement_command("setControlState", ["forward", True])
    assert is_movement_command("setControlState", ["sprint", True, 5])
    assert not is_movement_command("setControlState", ["forward"])
    assert not is_movement_command("setControlState", ["upward", True])
    assert not is_movement_command("chat", ["forward", True])


def test_classify_precedence():
    cfg = MovementConfig()
    # reached wins even if stuck and out of time
    assert (
        classify_stop(
            final_distance=2.85,
            target_distance=3.0,
            stuck_ms=5000,
            elapsed_ms=20000,
            config=cfg,
            max_duration_ms=10000,
        )
        is StopReason.REACHED_TARGET
    )
    assert (
        classify_stop(
            final_distance=1.0,
            target_distance=3.0,
            stuck_ms=2000,
            elapsed_ms=20000,
            config=cfg,
            max_duration_ms=10000,
        )
        is StopReason.STUCK
    )
    assert (
        classify_stop(
            final_distance=1.0,
            target_distance=3.0,
            stuck_ms=0,
            elapsed_ms=10000,
            config=cfg,
            max_duration_ms=10000,
        )
        is StopReason.TIMEOUT
    )
    assert (
        classify_stop(
            final_distance=1.0,
            target_distance=3.0,
            stuck_ms=0,
            elapsed_ms=500,
            config=cfg,
            max_duration_ms=10000,
        )
        is StopReason.UNKNOWN
    )


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_reaches_target():
    # 0.0, 0.5, ..., 3.0 then stays at 3.0
    bot = FakeBot(positions=line(0.5, 7))
    controller, clock = make_controller(bot)

    result = await controller.run("setControlState", ["forward", True], 3.0, 10_000)

    assert result.stop_reason is StopReason.REACHED_TARGET
    assert result.actual_distance == pytest.approx(3.0)
    assert result.samples == 6
    assert result.elapsed_ms == pytest.approx(600)
    assert bot.clear_calls == 1
    assert [c.args for c in bot.commands_named("setControlState")] == [["forward", True]]
    assert not controller.in_flight


@pytest.mark.asyncio
async def test_stuck_before_max_duration():
    bot = FakeBot(position=Position(10.0, 64.0, 10.0))
    controller, clock = make_controller(bot)

    result = await controller.run("setControlState", ["forward", True], 3.0, 10_000)

    assert result.stop_reason is StopReason.STUCK
    assert result.actual_distance == pytest.approx(0.0)
    # 20 stationary samples of 100 ms reach the 2000 ms stuck dwell.
    assert result.samples == 20
    assert result.elapsed_ms == pytest.approx(2000)
    assert result.elapsed_ms < 10_000
    assert bot.clear_calls == 1


@pytest.mark.asyncio
async def test_stuck_counter_resets_when_bot_moves_again():
    # Stationary for 1.5 s, one real step, then stationary again.
    positions = [Position(0, 64, 0)] * 16 + [Position(1.0, 64, 0)]
    bot = FakeBot(positions=positions)
    controller, _ = make_controller(bot)

    result = await controller.run("setControlState", ["forward", True], 3.0, 10_000)

    assert result.stop_reason is StopReason.STUCK
    # 15 stuck samples, 1 moving sample, then 20 more stuck samples.
    assert result.samples == 36
    assert result.actual_distance == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_timeout_when_moving_too_slowly():
    bot = FakeBot(positions=line(0.15, 100))
    controller, _ = make_controller(bot)

    result = await controller.run("setControlState", ["forward", True], 3.0, 1000)

    assert result.stop_reason is StopReason.TIMEOUT
    assert result.samples == 10
    assert result.elapsed_ms == pytest.approx(1000)
    # Final read happens after the loop, one step further along.
    assert result.actual_distance == pytest.approx(0.15 * 11)
    assert bot.clear_calls == 1


@pytest.mark.asyncio
async def test_defaults_come_from_config():
    cfg = MovementConfig(default_target_distance=1.0, default_max_duration_ms=500)
    bot = FakeBot(positions=line(0.25, 5))
    controller, _ = make_controller(bot, config=cfg)

    result = await controller.run("setControlState", ["back", True])

    assert result.target_distance == 1.0
    assert result.stop_reason is StopReason.REACHED_TARGET
    assert controller.config is cfg


@pytest.mark.asyncio
async def test_mid_loop_failure_still_clears_once():
    bot = FakeBot(positions=line(0.5, 100))
    bot.fail_position_after = 3  # start + 2 samples, then the 3rd sample fails
    controller, _ = make_controller(bot)

    with pytest.raises(ConnectionError):
        await controller.run("setControlState", ["forward", True], 5.0, 10_000)

    assert bot.clear_calls == 1
    assert not controller.in_flight


@pytest.mark.asyncio
async def test_issue_failure_raises_command_error_and_clears():
    bot = FakeBot()

    def broken(*args):
        raise OSError("socket closed")

    bot.set_command("setControlState", broken)
    controller, _ = make_controller(bot)

    with pytest.raises(CommandExecutionError) as excinfo:
        await controller.run("setControlState", ["forward", True], 3.0, 1000)

    assert "socket closed" in str(excinfo.value)
    assert bot.clear_calls == 1
    assert not controller.in_flight


@pytest.mark.asyncio
async def test_cancellation_clears_once():
    bot = FakeBot(position=Position(0, 64, 0))
    started = asyncio.Event()

    async def slow_sleep(seconds: float) -> None:
        started.set()
        await asyncio.sleep(3600)

    controller = MovementController(bot, sleep=slow_sleep)
    task = asyncio.create_task(controller.run("setControlState", ["forward", True], 3.0, 10_000))
    await started.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert bot.clear_calls == 1
    assert not controller.in_flight


@pytest.mark.asyncio
async def test_second_run_rejected_while_first_in_flight():
    bot = FakeBot(position=Position(0, 64, 0))
    gate = asyncio.Event()
    entered = asyncio.Event()

    async def gated_sleep(seconds: float) -> None:
        entered.set()
        await gate.wait()

    clock = FakeClock()
    controller = MovementController(bot, clock=clock, sleep=gated_sleep)
    first = asyncio.create_task(controller.run("setControlState", ["forward", True], 3.0, 100))
    await entered.wait()
    assert controller.in_flight

    with pytest.raises(MovementInProgressError):
        await controller.run("setControlState", ["left", True], 3.0, 100)

    # The rejected run issued nothing and released nothing.
    assert len(bot.commands_named("setControlState")) == 1
    assert bot.clear_calls == 0

    gate.set()
    result = await first
    assert result.command == "setControlState"
    assert bot.clear_calls == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("target, max_ms", [(0, 1000), (-1, 1000), (3.0, 0), (3.0, -5)])
async def test_invalid_inputs_rejected(target, max_ms):
    bot = FakeBot()
    controller, _ = make_controller(bot)

    with pytest.raises(ValueError):
        await controller.run("setControlState", ["forward", True], target, max_ms)

    assert bot.sent_commands == []
    assert bot.clear_calls == 0


@pytest.mark.asyncio
async def test_pending_command_completion_is_discarded_not_awaited():
    bot = FakeBot(positions=line(1.0, 4))
    ran: List[str] = []

    async def pending_control(*args) -> None:
        ran.append("ran")

    bot.set_command("setControlState", pending_control)
    controller, _ = make_controller(bot)

    result = await controller.run("setControlState", ["forward", True], 3.0, 1000)
    await asyncio.sleep(0)

    assert result.stop_reason is StopReason.REACHED_TARGET
    assert ran == ["ran"]


@pytest.mark.asyncio
async def test_discarded_completion_is_held_until_done():
    release = asyncio.Event()

    async def slow() -> str:
        await release.wait()
        return "done"

    before = set(_DISCARDED)
    completion = CommandCompletion("chat", pending=slow())
    completion.discard()

    held = [task for task in _DISCARDED if task not in before]
    assert len(held) == 1
    assert not held[0].done()

    release.set()
    await held[0]
    await asyncio.sleep(0)

    assert held[0] not in _DISCARDED


@pytest.mark.asyncio
async def test_result_dict_summary_and_bus_events(recorded_bus):
    bus, received = recorded_bus
    bot = FakeBot(positions=line(0.5, 7))
    controller, _ = make_controller(bot, bus=bus)

    result = await controller.run("setControlState", ["forward", True], 3.0, 10_000)

    data = result.to_dict()
    assert data["stopReason"] == "reached target"
    assert data["finalPosition"] == {"x": 3.0, "y": 64.0, "z": 0.0}
    assert data["directionArgs"] == ["forward", True]
    assert result.summary() == (
        "Executed: bot.setControlState(forward, True) for 3.00 blocks "
        "(target: 3.0, reached target). Position: (3, 64, 0)"
    )

    assert [e.event_type for e in received] == [
        EventType.MOVEMENT_STARTED,
        EventType.MOVEMENT_FINISHED,
    ]
    assert received[0].correlation_id == received[1].correlation_id
    assert received[1].payload["stopReason"] == "reached target"
