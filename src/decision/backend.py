# src/decision/backend.py
"""
Decision backends for reaction handlers.

A backend is the opaque "ask a language model what to do" call: it takes
a context prompt and returns free text. Two implementations:

- NullDecisionBackend: no model configured; always returns "".
- LlamaCppDecisionBackend (backend_llamacpp.py): local GGUF model via
  llama_cpp, imported lazily so the dependency stays optional.
"""

from __future__ import annotations

import logging
from typing import Optional

from contracts.llm import DecisionBackend
from env.schema import DecisionConfig


log = logging.getLogger(__name__)


class NullDecisionBackend:
    """DecisionBackend used when no model is configured."""

    def decide(self, prompt: str, *, system_prompt: Optional[str] = None) -> str:
        log.debug("NullDecisionBackend asked to decide; returning empty decision")
        return ""


def create_decision_backend(config: Optional[DecisionConfig] = None) -> DecisionBackend:
    """Build the backend named by `config.backend`."""
    cfg = config or DecisionConfig()

    if cfg.backend == "none":
        return NullDecisionBackend()
    if cfg.backend == "llama_cpp":
        # Lazy import: llama_cpp is an optional extra.
        from .backend_llamacpp import LlamaCppDecisionBackend

        return LlamaCppDecisionBackend(cfg)
    raise ValueError(f"Unknown decision backend: {cfg.backend!r}")
