#tests/test_decision_handlers.py
"""
Tests for decision.handlers.LlmReactionHandler and decision.backend

Covers:
- Reply extraction from free-text decisions
- Chat vs. whisper replies
- Fallback acknowledgement when the backend fails on a special chat
- Low-health / hostile-mob decisions without speech send nothing
- Backend factory
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import pytest

from bot_core.testing.fakes import FakeBot
from contracts.reactions import ReactionKind
from contracts.types import Event
from decision.backend import NullDecisionBackend, create_decision_backend
from decision.handlers import FALLBACK_REPLY, LlmReactionHandler, extract_reply
from env.schema import DecisionConfig


class ScriptedBackend:
    """DecisionBackend returning a fixed answer and recording prompts."""

    def __init__(self, answer: str) -> None:
        self.answer = answer
        self.prompts: List[Tuple[str, Optional[str]]] = []

    def decide(self, prompt: str, *, system_prompt: Optional[str] = None) -> str:
        self.prompts.append((prompt, system_prompt))
        return self.answer


class FailingBackend:
    def decide(self, prompt: str, *, system_prompt: Optional[str] = None) -> str:
        raise TimeoutError("model did not answer")


def event(event_type: str, payload) -> Event:
    return Event(id=42, type=event_type, timestamp=1.0, payload=payload)


def test_extract_reply():
    assert extract_reply('say "On my way!"') == "On my way!"
    assert extract_reply('I would chat: "hi" and then "bye"') == "hi"
    assert extract_reply("Just say hello") == "Hello!"
    assert extract_reply("Run away from the zombie") is None
    assert extract_reply("") is None


def test_special_chat_reply_goes_to_public_chat():
    backend = ScriptedBackend('say "Coming, alex!"')
    bot = FakeBot()
    handler = LlmReactionHandler(backend, bot_name="MCPBot")

    handler.react(
        ReactionKind.SPECIAL_CHAT,
        event("chat", {"username": "alex", "message": "bot come here"}),
        bot,
    )

    assert [c.args for c in bot.commands_named("chat")] == [["Coming, alex!"]]
    prompt, system_prompt = backend.prompts[0]
    assert '"message": "bot come here"' in prompt
    assert "MCPBot" in system_prompt


def test_whisper_reply_goes_back_to_sender():
    backend = ScriptedBackend('say "hello there"')
    bot = FakeBot()
    handler = LlmReactionHandler(backend)

    handler.react(
        ReactionKind.SPECIAL_CHAT,
        event("whisper", {"username": "sam", "message": "psst"}),
        bot,
    )

    assert bot.commands_named("chat") == []
    assert [c.args for c in bot.commands_named("whisper")] == [["sam", "hello there"]]


def test_plain_text_whisper_decision_is_whispered_back():
    bot = FakeBot()
    handler = LlmReactionHandler(ScriptedBackend("  I'm on my way to you now.\n"))

    handler.react(
        ReactionKind.SPECIAL_CHAT,
        event("whisper", {"username": "alex", "message": "where are you"}),
        bot,
    )

    assert bot.commands_named("chat") == []
    assert [c.args for c in bot.commands_named("whisper")] == [
        ["alex", "I'm on my way to you now."]
    ]


def test_blank_whisper_decision_sends_nothing():
    bot = FakeBot()
    handler = LlmReactionHandler(ScriptedBackend("   "))

    handler.react(
        ReactionKind.SPECIAL_CHAT,
        event("whisper", {"username": "alex", "message": "hi"}),
        bot,
    )

    assert bot.sent_commands == []


def test_backend_failure_on_special_chat_sends_fallback():
    bot = FakeBot()
    handler = LlmReactionHandler(FailingBackend())

    handler.react(
        ReactionKind.SPECIAL_CHAT,
        event("chat", {"username": "alex", "message": "help"}),
        bot,
    )

    assert [c.args for c in bot.commands_named("chat")] == [[FALLBACK_REPLY]]


def test_backend_failure_on_low_health_sends_nothing():
    bot = FakeBot()
    handler = LlmReactionHandler(FailingBackend())

    handler.react(ReactionKind.LOW_HEALTH, event("healthChanged", {"health": 3}), bot)

    assert bot.sent_commands == []


def test_non_speech_decision_sends_nothing():
    bot = FakeBot()
    handler = LlmReactionHandler(ScriptedBackend("Retreat and eat food."))

    handler.react(ReactionKind.HOSTILE_MOB, event("entitySpawn", {"entity_type": "zombie"}), bot)

    assert bot.sent_commands == []


def test_hostile_mob_speech_decision_is_acted_on():
    bot = FakeBot()
    handler = LlmReactionHandler(ScriptedBackend('chat "Zombie incoming!"'))

    handler.react(ReactionKind.HOSTILE_MOB, event("entitySpawn", {"entity_type": "zombie"}), bot)

    assert [c.args for c in bot.commands_named("chat")] == [["Zombie incoming!"]]


def test_no_actuator_only_consults_backend():
    backend = ScriptedBackend('say "hi"')
    handler = LlmReactionHandler(backend)

    handler.react(ReactionKind.SPECIAL_CHAT, event("chat", {"message": "bot"}), None)

    assert len(backend.prompts) == 1


def test_null_backend_decides_nothing():
    bot = FakeBot()
    handler = LlmReactionHandler(NullDecisionBackend())

    handler.react(ReactionKind.SPECIAL_CHAT, event("chat", {"message": "bot"}), bot)

    assert bot.sent_commands == []


def test_create_decision_backend():
    assert isinstance(create_decision_backend(), NullDecisionBackend)
    assert isinstance(create_decision_backend(DecisionConfig(backend="none")), NullDecisionBackend)
    with pytest.raises(ValueError):
        create_decision_backend(DecisionConfig(backend="openai"))


def test_llama_cpp_backend_uses_injected_model():
    pytest.importorskip("llama_cpp")
    from decision.backend_llamacpp import LlamaCppDecisionBackend

    class FakeLlama:
        def __init__(self) -> None:
            self.calls = []

        def create_chat_completion(self, **kwargs):
            self.calls.append(kwargs)
            return {"choices": [{"message": {"content": ' say "ok" '}}]}

    llm = FakeLlama()
    backend = LlamaCppDecisionBackend(DecisionConfig(backend="llama_cpp", model_path="m.gguf"), llm=llm)

    assert backend.decide("prompt", system_prompt="sys") == 'say "ok"'
    messages = llm.calls[0]["messages"]
    assert messages[0] == {"role": "system", "content": "sys"}
    assert messages[-1] == {"role": "user", "content": "prompt"}
