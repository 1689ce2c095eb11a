# src/decision/handlers.py
"""
LLM-backed reaction handler.

Turns a qualifying event into a context prompt, asks the DecisionBackend
what to do, and maps the free-text answer onto a bot command:

- a decision that mentions "chat" or "say" becomes a chat message with the
  first double-quoted phrase in the decision ("Hello!" if none)
- whispers are answered with a whisper back to the sender; a decision with
  no speech request is whispered back verbatim
- if the backend fails on a special chat, the bot still acknowledges it

Commands are fire-and-forget: their completions are explicitly discarded.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Mapping, Optional

from contracts.bot_core import BotActuator
from contracts.llm import DecisionBackend
from contracts.reactions import ReactionKind
from contracts.types import Event


log = logging.getLogger(__name__)

DEFAULT_REPLY = "Hello!"
FALLBACK_REPLY = "I received your message!"

_QUOTED = re.compile(r'"([^"]*)"')


SYSTEM_PROMPT_TEMPLATE = (
    "You are the decision module of a Minecraft bot named {bot_name}. "
    "Keep responses concise and relevant to Minecraft gameplay. "
    'To make the bot speak, answer with: say "<message>". '
    "Otherwise describe the action the bot should take."
)

PROMPTS = {
    ReactionKind.SPECIAL_CHAT: (
        "Special chat event: {event}. What should the bot do or say in response?"
    ),
    ReactionKind.LOW_HEALTH: (
        "The bot's health is low: {event}. What should the bot do to stay alive?"
    ),
    ReactionKind.HOSTILE_MOB: (
        "A hostile mob spawned near the bot: {event}. How should the bot respond?"
    ),
}


def extract_reply(decision: str) -> Optional[str]:
    """
    Return the chat message implied by a decision, or None if the decision
    does not ask the bot to speak.
    """
    lowered = decision.lower()
    if "chat" not in lowered and "say" not in lowered:
        return None
    match = _QUOTED.search(decision)
    return match.group(1) if match else DEFAULT_REPLY


def _payload_field(payload: Any, key: str) -> Any:
    return payload.get(key) if isinstance(payload, Mapping) else None


class LlmReactionHandler:
    """ReactionHandler that delegates the decision to a DecisionBackend."""

    def __init__(self, backend: DecisionBackend, *, bot_name: str = "MCPBot") -> None:
        self._backend = backend
        self._bot_name = bot_name
        self._system_prompt = SYSTEM_PROMPT_TEMPLATE.format(bot_name=bot_name)

    def react(
        self,
        kind: ReactionKind,
        event: Event,
        actuator: Optional[BotActuator],
    ) -> None:
        if kind is ReactionKind.LOW_HEALTH:
            log.warning("Low health: %s", event.payload)
        elif kind is ReactionKind.HOSTILE_MOB:
            log.warning("Hostile mob detected near bot: %s", event.payload)
        else:
            log.info("Handling special chat event id=%s", event.id)

        prompt = PROMPTS[kind].format(event=json.dumps(event.to_dict(), default=repr))
        try:
            decision = self._backend.decide(prompt, system_prompt=self._system_prompt)
        except Exception:
            log.exception("Decision backend failed for %s (event id=%s)", kind.value, event.id)
            if kind is ReactionKind.SPECIAL_CHAT and actuator is not None:
                self._reply(actuator, event, FALLBACK_REPLY)
            return

        log.info("Decision for %s (event id=%s): %s", kind.value, event.id, decision)
        if actuator is None:
            return

        reply = extract_reply(decision)
        if reply is None and event.type == "whisper":
            # Whispers always get an answer: the decision text itself.
            reply = decision.strip() or None
        if reply is not None:
            self._reply(actuator, event, reply)

    def _reply(self, actuator: BotActuator, event: Event, message: str) -> None:
        sender = _payload_field(event.payload, "username")
        if event.type == "whisper" and sender:
            actuator.execute("whisper", [sender, message]).discard()
        else:
            actuator.execute("chat", [message]).discard()
