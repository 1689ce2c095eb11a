# src/events/predicates.py
"""
Pure classification predicates used by the reaction dispatcher.

All predicates take the raw event payload. Payloads are stored unvalidated,
so a missing or malformed field simply means "no match".
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping


def _field(payload: Any, key: str) -> Any:
    if isinstance(payload, Mapping):
        return payload.get(key)
    return None


def is_special_chat(payload: Any, keywords: Iterable[str]) -> bool:
    """True if the chat message mentions any keyword (case-insensitive substring)."""
    message = _field(payload, "message")
    if not isinstance(message, str) or not message:
        return False
    lowered = message.lower()
    return any(keyword.lower() in lowered for keyword in keywords if keyword)


def is_low_health(payload: Any, threshold: float) -> bool:
    health = _field(payload, "health")
    if isinstance(health, bool) or not isinstance(health, (int, float)):
        return False
    return health < threshold


def is_hostile_mob(payload: Any, hostile_mobs: Iterable[str]) -> bool:
    entity_type = _field(payload, "entity_type")
    if not isinstance(entity_type, str):
        return False
    return entity_type.lower() in {mob.lower() for mob in hostile_mobs}
