# src/events/categories.py
"""
Static event category table.

Every event type maps to exactly one Category; types that are not listed
fall into Category.SYSTEM. Each category carries its own retention capacity.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Mapping, Optional


class Category(str, Enum):
    COMMUNICATION = "communication"   # chat, whisper, message
    SOCIAL = "social"                 # playerJoined, playerLeft
    ENTITIES = "entities"             # entitySpawn, entityGone
    WORLD = "world"                   # blockUpdate, timeChange
    BOT = "bot"                       # botSpawned, botDied, botKicked, healthChanged
    SYSTEM = "system"                 # everything else


EVENT_CATEGORIES: Dict[str, Category] = {
    "chat": Category.COMMUNICATION,
    "whisper": Category.COMMUNICATION,
    "message": Category.COMMUNICATION,
    "playerJoined": Category.SOCIAL,
    "playerLeft": Category.SOCIAL,
    "entitySpawn": Category.ENTITIES,
    "entityGone": Category.ENTITIES,
    "blockUpdate": Category.WORLD,
    "timeChange": Category.WORLD,
    "botSpawned": Category.BOT,
    "botDied": Category.BOT,
    "botKicked": Category.BOT,
    "healthChanged": Category.BOT,
}

# High-volume categories (entities, world) are kept short.
DEFAULT_CAPACITIES: Dict[Category, int] = {
    Category.COMMUNICATION: 50,
    Category.SOCIAL: 30,
    Category.ENTITIES: 20,
    Category.WORLD: 20,
    Category.BOT: 50,
    Category.SYSTEM: 20,
}


def category_for(event_type: str) -> Category:
    return EVENT_CATEGORIES.get(event_type, Category.SYSTEM)


def parse_category(name: object) -> Optional[Category]:
    """Resolve a category name; unknown names yield None."""
    if isinstance(name, Category):
        return name
    try:
        return Category(name)
    except (TypeError, ValueError):
        return None


def resolve_capacities(
    overrides: Optional[Mapping[str, int]] = None,
) -> Dict[Category, int]:
    """
    Merge per-category capacity overrides onto the defaults.

    Raises ValueError for unknown category names or non-positive capacities.
    """
    capacities = dict(DEFAULT_CAPACITIES)
    for name, value in (overrides or {}).items():
        category = parse_category(name)
        if category is None:
            raise ValueError(f"Unknown event category: {name!r}")
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(
                f"Capacity for category '{category.value}' must be a positive integer, "
                f"got {value!r}"
            )
        capacities[category] = value
    return capacities
