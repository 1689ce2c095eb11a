# src/app/runtime.py
"""
Runtime wiring for one bot connection.

AgentRuntime.build() assembles, in dependency order:

    EventBus -> EventBuffer <- ReactionDispatcher (LlmReactionHandler)
             -> bot listeners on the BotEventSource
             -> MovementController -> CommandExecutor (+ CommandTracer)
             -> BotStateInspector -> BotToolSurface

Reactions stay inert until on_spawn() binds the live actuator; build()
registers it on the source's raw "spawn" event.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional

from bot_core.commands import CommandExecutor
from bot_core.introspection import BotStateInspector
from bot_core.movement import MovementController
from bot_core.tracing import CommandTracer
from bot_tools.surface import BotToolSurface
from contracts.bot_core import BotActuator, BotEventSource
from contracts.llm import DecisionBackend
from decision.backend import create_decision_backend
from decision.handlers import LlmReactionHandler
from env.loader import load_environment
from env.schema import EnvProfile
from events.buffer import EventBuffer
from events.listeners import attach_bot_listeners
from events.reactions import ReactionDispatcher
from monitoring.bus import EventBus
from monitoring.logger import JsonFileLogger


log = logging.getLogger(__name__)


@dataclass
class AgentRuntime:
    """All long-lived components for one bot connection."""

    env: EnvProfile
    bus: EventBus
    actuator: BotActuator
    buffer: EventBuffer
    dispatcher: ReactionDispatcher
    movement: MovementController
    executor: CommandExecutor
    inspector: BotStateInspector
    tracer: CommandTracer
    surface: BotToolSurface
    event_logger: Optional[JsonFileLogger] = None

    @classmethod
    def build(
        cls,
        source: BotEventSource,
        actuator: BotActuator,
        env: Optional[EnvProfile] = None,
        decision_backend: Optional[DecisionBackend] = None,
        bus: Optional[EventBus] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> "AgentRuntime":
        """
        Wire every component and attach the bot listeners.

        `env` defaults to load_environment(); `decision_backend` defaults to
        the backend named in env.decision. `clock` and `sleep` drive the
        movement sampling loop.
        """
        env = env or load_environment()
        bus = bus or EventBus()
        bot_name = env.bot.username

        backend = decision_backend or create_decision_backend(env.decision)
        dispatcher = ReactionDispatcher(
            LlmReactionHandler(backend, bot_name=bot_name),
            rules=env.reactions.with_bot_name(bot_name),
            bus=bus,
        )
        buffer = EventBuffer(env.capacities, dispatcher=dispatcher, bus=bus)
        attach_bot_listeners(source, buffer)

        movement = MovementController(
            actuator, config=env.movement, clock=clock, sleep=sleep, bus=bus
        )
        tracer = CommandTracer()
        executor = CommandExecutor(actuator, movement, tracer=tracer)
        inspector = BotStateInspector(actuator)
        surface = BotToolSurface(buffer, executor, inspector, actuator, bus=bus)

        event_logger = None
        if env.logging.events_log_path:
            event_logger = JsonFileLogger(Path(env.logging.events_log_path), bus)

        log.info(
            "AgentRuntime built for profile=%s bot=%s decision=%s",
            env.name,
            bot_name,
            env.decision.backend,
        )
        runtime = cls(
            env=env,
            bus=bus,
            actuator=actuator,
            buffer=buffer,
            dispatcher=dispatcher,
            movement=movement,
            executor=executor,
            inspector=inspector,
            tracer=tracer,
            surface=surface,
            event_logger=event_logger,
        )
        source.on_event("spawn", lambda raw: runtime.on_spawn())
        return runtime

    def on_spawn(self) -> None:
        """Bot is live: let qualifying events trigger reactions."""
        self.dispatcher.bind_actuator(self.actuator)
        log.info("Bot %s spawned; reactions enabled", self.env.bot.username)

    def close(self) -> None:
        if self.event_logger is not None:
            self.event_logger.close()
            self.event_logger = None
