# src/events/reactions.py
"""
Reaction dispatcher.

Inspects every newly admitted event and, when the per-type rule holds,
invokes the injected ReactionHandler exactly once:

    chat           -> SPECIAL_CHAT  if the message hits a special keyword
    whisper        -> SPECIAL_CHAT  always
    healthChanged  -> LOW_HEALTH    if health < threshold
    entitySpawn    -> HOSTILE_MOB   if the entity type is hostile
    anything else  -> no reaction

Reactions run synchronously inside EventBuffer.admit(). A failing
predicate or reaction is logged (and published as REACTION_FAILED) and
never reaches the admission call.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from contracts.bot_core import BotActuator
from contracts.reactions import ReactionHandler, ReactionKind
from contracts.types import Event
from env.schema import ReactionRules
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from .predicates import is_hostile_mob, is_low_health, is_special_chat


log = logging.getLogger(__name__)


class NullReactionHandler:
    """ReactionHandler that does nothing; used when no handler is configured."""

    def react(
        self,
        kind: ReactionKind,
        event: Event,
        actuator: Optional[BotActuator],
    ) -> None:
        log.debug("No reaction configured for %s (event id=%s)", kind.value, event.id)


class ReactionDispatcher:
    """
    Per-type predicate evaluation plus isolated reaction invocation.

    The actuator handle is bound once the bot is live (see bind_actuator);
    until then qualifying events are stored but trigger nothing.
    """

    def __init__(
        self,
        handler: Optional[ReactionHandler] = None,
        *,
        actuator: Optional[BotActuator] = None,
        rules: Optional[ReactionRules] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._handler: ReactionHandler = handler or NullReactionHandler()
        self._actuator = actuator
        self._rules = rules or ReactionRules()
        self._bus = bus

        self._rule_table: Dict[str, Callable[[Event], Optional[ReactionKind]]] = {
            "chat": self._classify_chat,
            "whisper": lambda event: ReactionKind.SPECIAL_CHAT,
            "healthChanged": self._classify_health,
            "entitySpawn": self._classify_spawn,
        }

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def bind_actuator(self, actuator: Optional[BotActuator]) -> None:
        self._actuator = actuator

    @property
    def rules(self) -> ReactionRules:
        return self._rules

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def _classify_chat(self, event: Event) -> Optional[ReactionKind]:
        if is_special_chat(event.payload, self._rules.special_keywords):
            return ReactionKind.SPECIAL_CHAT
        return None

    def _classify_health(self, event: Event) -> Optional[ReactionKind]:
        if is_low_health(event.payload, self._rules.low_health_threshold):
            return ReactionKind.LOW_HEALTH
        return None

    def _classify_spawn(self, event: Event) -> Optional[ReactionKind]:
        if is_hostile_mob(event.payload, self._rules.hostile_mobs):
            return ReactionKind.HOSTILE_MOB
        return None

    def classify(self, event: Event) -> Optional[ReactionKind]:
        """Return the reaction this event qualifies for, if any."""
        rule = self._rule_table.get(event.type)
        if rule is None:
            return None
        return rule(event)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, event: Event) -> Optional[ReactionKind]:
        """
        Run the reaction for `event` if it qualifies.

        Returns the reaction kind that was invoked, or None. Never raises.
        """
        if self._actuator is None:
            return None

        kind: Optional[ReactionKind] = None
        try:
            kind = self.classify(event)
            if kind is None:
                return None

            log.info("Reaction %s for event id=%s type=%s", kind.value, event.id, event.type)
            self._publish(
                EventType.REACTION_TRIGGERED,
                f"Reaction {kind.value} triggered",
                event,
                kind,
            )
            self._handler.react(kind, event, self._actuator)
        except Exception as exc:
            log.exception(
                "Reaction failed for event id=%s type=%s", event.id, event.type
            )
            self._publish(
                EventType.REACTION_FAILED,
                "Reaction raised an exception",
                event,
                kind,
                exception_repr=repr(exc),
            )
            return None

        return kind

    def _publish(
        self,
        event_type: EventType,
        message: str,
        event: Event,
        kind: Optional[ReactionKind],
        **extra: str,
    ) -> None:
        if self._bus is None:
            return
        payload = {
            "event_id": event.id,
            "event_type": event.type,
            "reaction": kind.value if kind is not None else None,
        }
        payload.update(extra)
        log_event(
            bus=self._bus,
            module="events.reactions",
            event_type=event_type,
            message=message,
            payload=payload,
            correlation_id=str(event.id),
        )
