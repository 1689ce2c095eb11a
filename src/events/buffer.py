# bounded per-category event storage
# src/events/buffer.py
"""
Categorized bounded event buffer.

Holds one FIFO per Category, each capped at that category's capacity.
The buffer owns the identity counter: ids are global across categories,
start at 1, and are never reused or reset.

Rules:
- admit() never fails and never validates payloads.
- Reactions run synchronously with admission but outside the buffer lock.
- query() and stats() are read-only.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import (
    Any,
    Callable,
    Deque,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
)

from contracts.types import Event
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event
from .categories import Category, category_for, parse_category, resolve_capacities


log = logging.getLogger(__name__)

DEFAULT_QUERY_LIMIT = 10


class AdmissionHook(Protocol):
    """Anything that wants to see each newly admitted event (the dispatcher)."""

    def dispatch(self, event: Event) -> Any:
        ...


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass
class CategoryStats:
    queue_size: int
    max_size: int
    oldest_event: Optional[float]
    newest_event: Optional[float]
    event_types: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "queueSize": self.queue_size,
            "maxSize": self.max_size,
            "oldestEvent": self.oldest_event,
            "newestEvent": self.newest_event,
            "eventTypes": list(self.event_types),
        }


@dataclass
class BufferStats:
    total_events: int
    categories: Dict[Category, CategoryStats] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalEvents": self.total_events,
            "categories": {
                category.value: stats.to_dict()
                for category, stats in self.categories.items()
            },
        }


# ---------------------------------------------------------------------------
# Buffer
# ---------------------------------------------------------------------------


class EventBuffer:
    """
    In-memory, process-lifetime store of recent bot events.

    Construct once per bot connection; every instance has its own counter,
    so tests can build as many independent buffers as they like.
    """

    def __init__(
        self,
        capacities: Optional[Mapping[str, int]] = None,
        *,
        dispatcher: Optional[AdmissionHook] = None,
        clock: Callable[[], float] = time.time,
        bus: Optional[EventBus] = None,
    ) -> None:
        self._capacities: Dict[Category, int] = resolve_capacities(capacities)
        self._queues: Dict[Category, Deque[Event]] = {
            category: deque(maxlen=capacity)
            for category, capacity in self._capacities.items()
        }
        self._last_event_id: int = 0
        self._dispatcher = dispatcher
        self._clock = clock
        self._bus = bus
        self._lock = Lock()

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def set_dispatcher(self, dispatcher: Optional[AdmissionHook]) -> None:
        self._dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Admission
    # ------------------------------------------------------------------

    def admit(self, event_type: str, payload: Any = None) -> Event:
        """
        Store a new event and hand it to the dispatcher.

        The payload is stored as-is; validation is the emitter's job.
        """
        category = category_for(event_type)

        with self._lock:
            self._last_event_id += 1
            event = Event(
                id=self._last_event_id,
                type=event_type,
                timestamp=self._clock(),
                payload=payload,
            )
            queue = self._queues[category]
            if len(queue) == queue.maxlen:
                log.debug(
                    "Evicting event id=%s from category=%s (capacity=%s)",
                    queue[0].id,
                    category.value,
                    queue.maxlen,
                )
            # deque(maxlen=...) drops from the left, i.e. the oldest id.
            queue.append(event)

        if self._bus is not None:
            log_event(
                bus=self._bus,
                module="events.buffer",
                event_type=EventType.EVENT_ADMITTED,
                message=f"Admitted {event_type}",
                payload={"id": event.id, "type": event_type, "category": category.value},
            )

        dispatcher = self._dispatcher
        if dispatcher is not None:
            try:
                dispatcher.dispatch(event)
            except Exception:
                # Admission must not fail.
                log.exception("Dispatcher failed for event id=%s", event.id)

        return event

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def query(
        self,
        category: Optional[str] = None,
        since: float = 0,
        limit: Optional[int] = DEFAULT_QUERY_LIMIT,
        event_types: Optional[Iterable[str]] = None,
    ) -> List[Event]:
        """
        Return the most recent events matching the filters, oldest first.

        - category: restrict to one category; an unknown name yields [].
        - since: keep only events with timestamp strictly greater.
        - limit: keep the last `limit` matches (truncated to int); <= 0 yields [].
        - event_types: keep only these event types.
        """
        if limit is None:
            limit = DEFAULT_QUERY_LIMIT
        limit = int(limit)
        if limit <= 0:
            return []

        with self._lock:
            if category is None:
                pool: List[Event] = [e for q in self._queues.values() for e in q]
            else:
                resolved = parse_category(category)
                if resolved is None:
                    return []
                pool = list(self._queues[resolved])

        wanted = set(event_types) if event_types is not None else None
        matches = [
            e
            for e in pool
            if e.timestamp > since and (wanted is None or e.type in wanted)
        ]
        matches.sort(key=lambda e: (e.timestamp, e.id))
        return matches[-limit:]

    def stats(self) -> BufferStats:
        with self._lock:
            result = BufferStats(total_events=self._last_event_id)
            for category, queue in self._queues.items():
                result.categories[category] = CategoryStats(
                    queue_size=len(queue),
                    max_size=self._capacities[category],
                    oldest_event=queue[0].timestamp if queue else None,
                    newest_event=queue[-1].timestamp if queue else None,
                    event_types=list(dict.fromkeys(e.type for e in queue)),
                )
        return result

    # ------------------------------------------------------------------
    # Small helpers
    # ------------------------------------------------------------------

    @property
    def total_events(self) -> int:
        return self._last_event_id

    def capacity(self, category: str) -> Optional[int]:
        resolved = parse_category(category)
        return self._capacities[resolved] if resolved is not None else None

    def __len__(self) -> int:
        with self._lock:
            return sum(len(q) for q in self._queues.values())
