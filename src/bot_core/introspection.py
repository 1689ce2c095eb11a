# src/bot_core/introspection.py
"""
Read access to live bot state for external agents.

Two entry points:

- status(): a fixed set of named fields (position, health, food,
  inventory, selected slot, held item).
- inspect(path): dotted-path lookup such as "position.x" or
  "inventory.0.name", restricted to an allow-list of top-level fields and
  a bounded number of segments.

Lookup failures raise PropertyLookupError naming the failing segment and a
sample of the keys that were available there.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from contracts.bot_core import BotActuator
from contracts.errors import PropertyLookupError


log = logging.getLogger(__name__)

STATUS_FIELDS = (
    "username",
    "position",
    "health",
    "food",
    "inventory",
    "quick_bar_slot",
    "held_item",
)

DEFAULT_ALLOWED_FIELDS: FrozenSet[str] = frozenset(
    STATUS_FIELDS + ("yaw", "pitch", "experience", "game_mode", "entities", "time")
)

DEFAULT_MAX_DEPTH = 4
MAX_AVAILABLE_KEYS = 10


def to_jsonable(value: Any) -> Any:
    """Best-effort conversion of live state values into JSON-safe data."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if hasattr(value, "to_dict"):
        return to_jsonable(value.to_dict())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(dataclasses.asdict(value))
    if isinstance(value, Mapping):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return repr(value)


def _keys_of(value: Any) -> List[str]:
    if isinstance(value, Mapping):
        return [str(k) for k in value.keys()]
    if isinstance(value, Sequence) and not isinstance(value, str):
        return [str(i) for i in range(len(value))]
    return []


class BotStateInspector:
    """Allow-listed, depth-bounded view over BotActuator.read_state()."""

    def __init__(
        self,
        actuator: BotActuator,
        *,
        allowed_fields: Optional[Iterable[str]] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        if max_depth < 1:
            raise ValueError("max_depth must be >= 1")
        self._actuator = actuator
        self._allowed = (
            frozenset(allowed_fields) if allowed_fields is not None else DEFAULT_ALLOWED_FIELDS
        )
        self._max_depth = max_depth

    @property
    def allowed_fields(self) -> FrozenSet[str]:
        return self._allowed

    # ------------------------------------------------------------------
    # Fixed accessor
    # ------------------------------------------------------------------

    def status(self) -> Dict[str, Any]:
        state = self._actuator.read_state()
        return {name: to_jsonable(state.get(name)) for name in STATUS_FIELDS}

    # ------------------------------------------------------------------
    # Dotted-path lookup
    # ------------------------------------------------------------------

    def inspect(self, path: str) -> Any:
        segments = (path or "").split(".")
        if not path or any(not s for s in segments):
            raise PropertyLookupError(
                path=path,
                segment="",
                resolved_path="",
                reason=f"Invalid property path '{path}'",
                available=sorted(self._allowed)[:MAX_AVAILABLE_KEYS],
                truncated=len(self._allowed) > MAX_AVAILABLE_KEYS,
            )

        if len(segments) > self._max_depth:
            raise PropertyLookupError(
                path=path,
                segment=segments[self._max_depth],
                resolved_path=".".join(segments[: self._max_depth]),
                reason=(
                    f"Property path '{path}' is too deep "
                    f"(max {self._max_depth} segments)"
                ),
            )

        root = segments[0]
        if root not in self._allowed:
            allowed = sorted(self._allowed)
            raise PropertyLookupError(
                path=path,
                segment=root,
                resolved_path="",
                reason=f"Property '{root}' is not inspectable",
                available=allowed[:MAX_AVAILABLE_KEYS],
                truncated=len(allowed) > MAX_AVAILABLE_KEYS,
            )

        value: Any = self._actuator.read_state()
        resolved = ""
        for key in segments:
            parent = resolved
            current = f"{resolved}.{key}" if resolved else key

            if value is None:
                raise PropertyLookupError(
                    path=path,
                    segment=key,
                    resolved_path=parent,
                    reason=f"Property path '{parent}' is null. Cannot access '{key}' in '{path}'",
                )

            value = to_jsonable(value) if not isinstance(value, (Mapping, list, tuple)) else value
            if isinstance(value, Mapping):
                if key not in value:
                    self._raise_missing(path, key, parent, value, at_root=not parent)
                value = value[key]
            elif isinstance(value, (list, tuple)):
                if not key.isdigit() or int(key) >= len(value):
                    self._raise_missing(path, key, parent, value)
                value = value[int(key)]
            else:
                raise PropertyLookupError(
                    path=path,
                    segment=key,
                    resolved_path=parent,
                    reason=(
                        f"Property path '{parent}' is not an object "
                        f"(type: {type(value).__name__}). Cannot access '{key}' in '{path}'"
                    ),
                )
            resolved = current

        log.debug("Inspected bot property %s", path)
        return to_jsonable(value)

    def _raise_missing(
        self,
        path: str,
        key: str,
        parent: str,
        container: Any,
        *,
        at_root: bool = False,
    ) -> None:
        keys = _keys_of(container)
        if at_root:
            keys = sorted(k for k in keys if k in self._allowed)
        raise PropertyLookupError(
            path=path,
            segment=key,
            resolved_path=parent,
            reason=f"Property '{key}' not found in '{parent or 'bot'}'",
            available=keys[:MAX_AVAILABLE_KEYS],
            truncated=len(keys) > MAX_AVAILABLE_KEYS,
        )
