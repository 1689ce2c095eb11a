# events package
# src/events/__init__.py
"""
Observed bot events.

Exports:
    - Category / category_for: static event-type -> category table
    - EventBuffer: bounded per-category storage with global ids
    - ReactionDispatcher: per-type reactions on admission
    - attach_bot_listeners: raw bot events -> admissions
"""

from __future__ import annotations

from .categories import Category, DEFAULT_CAPACITIES, category_for, parse_category
from .buffer import BufferStats, CategoryStats, EventBuffer
from .reactions import NullReactionHandler, ReactionDispatcher
from .listeners import attach_bot_listeners

__all__ = [
    "Category",
    "DEFAULT_CAPACITIES",
    "category_for",
    "parse_category",
    "EventBuffer",
    "BufferStats",
    "CategoryStats",
    "ReactionDispatcher",
    "NullReactionHandler",
    "attach_bot_listeners",
]
