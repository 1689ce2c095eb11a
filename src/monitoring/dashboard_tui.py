# rich-based TUI dashboard
# src/monitoring/dashboard_tui.py
"""
TUI dashboard for the bot event monitor.

A lightweight terminal UI (using `rich`) that subscribes to the monitoring
EventBus and renders:

- Event buffer:
    - Per-category queue size / capacity
    - Event types currently held

- Movement:
    - Last run's command, distance, stop reason

- Activity:
    - Most recent reactions and command results

This runs entirely offline. No web server, no external services.
"""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Any, Deque, Dict, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from events.buffer import EventBuffer
from .bus import EventBus
from .events import EventType, MonitoringEvent


MAX_ACTIVITY_ROWS = 8

_ACTIVITY_TYPES = {
    EventType.REACTION_TRIGGERED,
    EventType.REACTION_FAILED,
    EventType.COMMAND_EXECUTED,
    EventType.COMMAND_FAILED,
}


# ============================================================
# TUI Dashboard
# ============================================================

class EventDashboard:
    """
    Live terminal dashboard bound to a monitoring.EventBus.

    Buffer statistics are read straight from the EventBuffer at render time;
    movement and activity state is accumulated from MonitoringEvents.
    """

    def __init__(
        self,
        bus: EventBus,
        buffer: EventBuffer,
        *,
        console: Optional[Console] = None,
    ) -> None:
        self._bus = bus
        self._buffer = buffer
        self._console = console or Console()
        self._lock = Lock()

        self._last_movement: Optional[Dict[str, Any]] = None
        self._activity: Deque[MonitoringEvent] = deque(maxlen=MAX_ACTIVITY_ROWS)

        self._bus.subscribe(self._on_event)

    def close(self) -> None:
        self._bus.unsubscribe(self._on_event)

    # --------------------------------------------------------
    # Event handler
    # --------------------------------------------------------

    def _on_event(self, event: MonitoringEvent) -> None:
        """Update dashboard state. Must stay cheap and non-blocking."""
        with self._lock:
            if event.event_type == EventType.MOVEMENT_FINISHED:
                self._last_movement = dict(event.payload)
            elif event.event_type in _ACTIVITY_TYPES:
                self._activity.append(event)

    @property
    def last_movement(self) -> Optional[Dict[str, Any]]:
        return self._last_movement

    # --------------------------------------------------------
    # Rendering helpers
    # --------------------------------------------------------

    def _render_buffer_panel(self) -> Panel:
        stats = self._buffer.stats()

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Category", style="bold")
        table.add_column("Size", justify="right")
        table.add_column("Types")

        for category, cat_stats in stats.categories.items():
            table.add_row(
                category.value,
                f"{cat_stats.queue_size}/{cat_stats.max_size}",
                ", ".join(cat_stats.event_types) or "-",
            )

        return Panel(
            table,
            title="Event Buffer",
            subtitle=f"total events: {stats.total_events}",
            border_style="cyan",
        )

    def _render_movement_panel(self) -> Panel:
        movement = self._last_movement

        table = Table.grid()
        table.add_column(justify="left")

        if movement is None:
            table.add_row("[bold]No movement yet.[/bold]")
        else:
            args = ", ".join(str(a) for a in movement.get("directionArgs") or [])
            table.add_row(f"[bold]Command:[/bold] {movement.get('command')}({args})")
            table.add_row(
                f"[bold]Distance:[/bold] {movement.get('actualDistance', 0.0):.2f}"
                f" / {movement.get('targetDistance')}"
            )
            table.add_row(f"[bold]Stop:[/bold] {movement.get('stopReason')}")
            table.add_row(f"[bold]Elapsed:[/bold] {movement.get('elapsedMs')} ms")

        return Panel(table, title="Movement", border_style="green")

    def _render_activity_panel(self) -> Panel:
        with self._lock:
            recent = list(self._activity)

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Time", width=8)
        table.add_column("Kind", style="bold")
        table.add_column("Message")

        if not recent:
            table.add_row("-", "<none>", "")
        for event in reversed(recent):
            failed = event.event_type in (EventType.REACTION_FAILED, EventType.COMMAND_FAILED)
            table.add_row(
                time.strftime("%H:%M:%S", time.localtime(event.ts)),
                Text(event.event_type.name, style="red" if failed else "green"),
                event.message,
            )

        return Panel(table, title="Activity", border_style="magenta")

    def render(self) -> Group:
        """Build the full dashboard renderable from the current state."""
        return Group(
            self._render_buffer_panel(),
            self._render_movement_panel(),
            self._render_activity_panel(),
        )

    # --------------------------------------------------------
    # Main loop
    # --------------------------------------------------------

    def run(self, refresh_per_second: float = 4.0) -> None:
        """
        Run the TUI loop.

        This blocks the current thread. Use a separate thread if needed.
        """
        refresh_delay = 1.0 / max(refresh_per_second, 0.1)
        with Live(self.render(), console=self._console, refresh_per_second=refresh_per_second) as live:
            while True:
                live.update(self.render())
                time.sleep(refresh_delay)
