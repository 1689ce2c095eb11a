# decision package
# src/decision/__init__.py
"""
Decision layer for event reactions.

Exports:
    - LlmReactionHandler: ReactionHandler backed by a DecisionBackend
    - NullDecisionBackend / create_decision_backend
"""

from __future__ import annotations

from .backend import NullDecisionBackend, create_decision_backend
from .handlers import LlmReactionHandler, extract_reply

__all__ = [
    "LlmReactionHandler",
    "extract_reply",
    "NullDecisionBackend",
    "create_decision_backend",
]
