# core shared types: Position, CommandCompletion
# src/contracts/types.py

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, Mapping, Optional, Set


log = logging.getLogger(__name__)

# Discarded completions still running; held so the loop keeps a strong ref.
_DISCARDED: Set["asyncio.Future[Any]"] = set()


# ---------------------------------------------------------------------------
# Positions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Position:
    """Bot position in world coordinates (blocks)."""
    x: float
    y: float
    z: float

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Position":
        return cls(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            z=float(data.get("z", 0.0)),
        )

    def distance_to(self, other: "Position") -> float:
        """Plain 3-D Euclidean distance."""
        return math.sqrt(
            (self.x - other.x) ** 2
            + (self.y - other.y) ** 2
            + (self.z - other.z) ** 2
        )

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "z": self.z}

    def floored(self) -> str:
        return f"({math.floor(self.x)}, {math.floor(self.y)}, {math.floor(self.z)})"


# ---------------------------------------------------------------------------
# Command completions
# ---------------------------------------------------------------------------

@dataclass
class CommandCompletion:
    """
    Result of issuing a single actuator command.

    Either the command finished synchronously (`value` is set and `pending`
    is None) or it is still running and `pending` holds the awaitable that
    completes it. Callers must either `await completion.wait()` or call
    `completion.discard()`; they never inspect the runtime type of `value`.
    """

    command: str
    value: Any = None
    pending: Optional[Awaitable[Any]] = None

    @property
    def is_pending(self) -> bool:
        return self.pending is not None

    async def wait(self) -> Any:
        """Await the pending completion (if any) and return the final value."""
        if self.pending is not None:
            pending, self.pending = self.pending, None
            self.value = await pending
        return self.value

    def discard(self) -> None:
        """
        Explicitly drop interest in the completion.

        A pending coroutine is scheduled on the running loop so it still runs;
        failures are logged instead of being lost. Without a running loop the
        coroutine is closed.
        """
        pending, self.pending = self.pending, None
        if pending is None:
            return

        if not isinstance(pending, asyncio.Future):
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                log.warning("No running loop; dropping pending command %r", self.command)
                if inspect.iscoroutine(pending):
                    pending.close()
                return
            pending = asyncio.ensure_future(pending, loop=loop)

        _DISCARDED.add(pending)
        pending.add_done_callback(_DISCARDED.discard)
        pending.add_done_callback(self._log_failure)

    def _log_failure(self, future: "asyncio.Future[Any]") -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            log.error("Discarded command %r failed: %r", self.command, exc)


# ---------------------------------------------------------------------------
# Observed events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Event:
    """Immutable timestamped record of something observed about the bot.

    Fields:

      - id:
          Monotonically increasing integer >= 1, global across all
          categories. Never reused.

      - type:
          Event type tag, e.g. "chat", "entitySpawn", "healthChanged".

      - timestamp:
          Admission time in seconds (wall clock).

      - payload:
          Type-specific structured data, stored exactly as emitted.
    """
    id: int
    type: str
    timestamp: float
    payload: Any

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "timestamp": self.timestamp,
            "data": self.payload,
        }
