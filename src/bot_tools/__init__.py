# src/bot_tools/__init__.py
"""
Tool-exposure surface.

Exports:
    - BotToolSurface: every outward bot operation, returning ToolResponse
    - ToolResponse, create_response, create_error_response
"""

from __future__ import annotations

from .surface import (
    BotToolSurface,
    ToolResponse,
    create_error_response,
    create_response,
)

__all__ = [
    "BotToolSurface",
    "ToolResponse",
    "create_response",
    "create_error_response",
]
