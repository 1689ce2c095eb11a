# src/app/__init__.py
"""
Application wiring for the bot agent.

Exposes:
- AgentRuntime: buffer, reactions, movement, commands and tool surface
  wired together for one bot connection
- configure_logging: stdout logging setup for entrypoints
"""

from __future__ import annotations

from .logging_config import configure_logging
from .runtime import AgentRuntime

__all__ = [
    "AgentRuntime",
    "configure_logging",
]
