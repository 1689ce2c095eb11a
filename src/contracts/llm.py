# DecisionBackend interface definition
# src/contracts/llm.py

from __future__ import annotations

from typing import Optional, Protocol


class DecisionBackend(Protocol):
    """Opaque "ask a language model what to do" call: context in, text out."""

    def decide(self, prompt: str, *, system_prompt: Optional[str] = None) -> str:
        """Return the model's free-text decision for the given context prompt."""
        ...
