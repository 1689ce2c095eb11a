# src/events/listeners.py
"""
Bind raw bot events to EventBuffer admissions.

BotEventSource implementations deliver one mapping per raw event, using the
game client's own event names ("chat", "health", "spawn", ...). The handlers
here normalize those mappings into the payloads stored in the buffer and
rename a few events on the way ("health" -> "healthChanged").
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Mapping, Optional

from contracts.bot_core import BotEventSource
from .buffer import EventBuffer


log = logging.getLogger(__name__)

Normalizer = Callable[[Mapping[str, Any]], Optional[Dict[str, Any]]]


def _position(raw: Any) -> Optional[Dict[str, float]]:
    if raw is None:
        return None
    if isinstance(raw, Mapping):
        return {axis: raw.get(axis) for axis in ("x", "y", "z")}
    # Vec3-like objects
    return {axis: getattr(raw, axis, None) for axis in ("x", "y", "z")}


def _entity_type(raw: Mapping[str, Any]) -> Any:
    return raw.get("name") or raw.get("type")


def _chat(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {"username": raw.get("username"), "message": raw.get("message")}


def _message(raw: Mapping[str, Any]) -> Dict[str, Any]:
    json_msg = raw.get("json")
    text = raw.get("text")
    if text is None and json_msg is not None:
        text = str(json_msg)
    return {"text": text, "json": json_msg}


def _player(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {"username": raw.get("username")}


def _entity_spawn(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "entity_type": _entity_type(raw),
        "position": _position(raw.get("position")),
        "id": raw.get("id"),
    }


def _entity_gone(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {"entity_type": _entity_type(raw), "id": raw.get("id")}


def _block_update(raw: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    old_block = raw.get("old_block")
    new_block = raw.get("new_block")
    if not old_block or not new_block:
        return None
    old_type = old_block.get("type")
    new_type = new_block.get("type")
    # Only actual block changes; state-only updates are noise.
    if old_type == new_type:
        return None
    return {
        "position": _position(new_block.get("position")),
        "old_type": old_type,
        "new_type": new_type,
    }


def _health(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {"health": raw.get("health"), "food": raw.get("food")}


def _time(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {"time": raw.get("time"), "is_day": raw.get("is_day")}


def _spawn(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {"position": _position(raw.get("position"))}


def _death(raw: Mapping[str, Any]) -> Dict[str, Any]:
    # Death cause is not reported by the client.
    return {"position": _position(raw.get("position")), "cause": "unknown"}


def _kicked(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {"reason": raw.get("reason")}


# raw event name -> (admitted event type, normalizer)
LISTENER_TABLE: Dict[str, tuple[str, Normalizer]] = {
    "chat": ("chat", _chat),
    "whisper": ("whisper", _chat),
    "message": ("message", _message),
    "playerJoined": ("playerJoined", _player),
    "playerLeft": ("playerLeft", _player),
    "entitySpawn": ("entitySpawn", _entity_spawn),
    "entityGone": ("entityGone", _entity_gone),
    "blockUpdate": ("blockUpdate", _block_update),
    "health": ("healthChanged", _health),
    "time": ("timeChange", _time),
    "spawn": ("botSpawned", _spawn),
    "death": ("botDied", _death),
    "kicked": ("botKicked", _kicked),
}


def _make_handler(
    buffer: EventBuffer,
    event_type: str,
    normalize: Normalizer,
) -> Callable[[Mapping[str, Any]], None]:
    def handler(raw: Mapping[str, Any]) -> None:
        try:
            payload = normalize(raw)
        except Exception:
            # Keep the raw event rather than dropping it.
            log.exception("Failed to normalize raw %s event", event_type)
            payload = dict(raw) if isinstance(raw, Mapping) else raw
        if payload is None:
            return
        buffer.admit(event_type, payload)

    return handler


def attach_bot_listeners(source: BotEventSource, buffer: EventBuffer) -> None:
    """Register one normalizing handler per known raw bot event."""
    for raw_name, (event_type, normalize) in LISTENER_TABLE.items():
        source.on_event(raw_name, _make_handler(buffer, event_type, normalize))
    log.debug("Attached %d bot event listeners", len(LISTENER_TABLE))
