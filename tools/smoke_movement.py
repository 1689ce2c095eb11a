#!/usr/bin/env python3
"""
tools/smoke_movement.py

Minimal harness to sanity-check AgentRuntime wiring without a server.

Uses FakeBot (no real network) and a FakeClock so movement runs finish
instantly:
    - Emits a few raw bot events (spawn, chat, health, entitySpawn)
    - Calls the tool surface:
        - get_recent_events / get_event_stats
        - execute_bot_command(setControlState forward)
        - inspect_bot_property(position)
    - Prints each ToolResponse and the commands the fake bot received
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Iterator

# ---------------------------------------------------------------------------
# Ensure src/ is on sys.path when running as a script
# ---------------------------------------------------------------------------

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# ---------------------------------------------------------------------------
# Imports from the project
# ---------------------------------------------------------------------------

from app import AgentRuntime, configure_logging  # type: ignore[import]
from bot_core.testing.fakes import FakeBot, FakeClock  # type: ignore[import]
from bot_tools.surface import ToolResponse  # type: ignore[import]
from contracts.types import Position  # type: ignore[import]
from env.loader import load_environment  # type: ignore[import]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _print_header(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def _print_response(response: ToolResponse) -> None:
    print(json.dumps(response.to_dict(), indent=2))


def _walk_forward(step: float) -> Iterator[Position]:
    x = 0.0
    while True:
        yield Position(x, 64.0, 0.0)
        x += step


async def run_fake_mode(config: Path | None) -> None:
    """Drive the full runtime against FakeBot. No Minecraft required."""
    _print_header("Fake mode: building AgentRuntime with FakeBot")

    env = load_environment(config)
    env.logging.events_log_path = None

    bot = FakeBot(positions=_walk_forward(0.15), username=env.bot.username)
    # Fake clock: the movement run below completes instantly.
    clock = FakeClock()
    runtime = AgentRuntime.build(bot, bot, env=env, clock=clock, sleep=clock.sleep)

    bot.emit("spawn", {"position": {"x": 0, "y": 64, "z": 0}})
    bot.emit("chat", {"username": "steve", "message": "hey bot, come here"})
    bot.emit("health", {"health": 6, "food": 18})
    bot.emit("entitySpawn", {"name": "zombie", "id": 7, "position": {"x": 3, "y": 64, "z": 1}})

    _print_header("get_recent_events")
    _print_response(runtime.surface.get_recent_events())

    _print_header("get_event_stats")
    _print_response(runtime.surface.get_event_stats())

    _print_header("execute_bot_command: setControlState forward true 3 5")
    _print_response(
        await runtime.surface.execute_bot_command("setControlState", ["forward", "true", 3, 5])
    )

    _print_header("inspect_bot_property: position")
    _print_response(runtime.surface.inspect_bot_property("position"))

    print("\nSent commands:")
    for c in bot.sent_commands:
        print(f"  - {c.command}: {c.args}")
    print(f"clear_control_states calls: {bot.clear_calls}")

    runtime.close()
    _print_header("Fake mode completed")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Smoke test harness for the bot agent runtime",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to agent.yaml (defaults to config/agent.yaml or BOT_AGENT_CONFIG)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    asyncio.run(run_fake_mode(args.config))


if __name__ == "__main__":
    main()
