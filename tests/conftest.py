# tests/conftest.py

from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Tuple

import pytest

# Running pytest from a checkout without `pip install -e .` still needs
# `import events`, `import bot_core`, ... to resolve against src/.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from monitoring.bus import EventBus  # noqa: E402
from monitoring.events import MonitoringEvent  # noqa: E402


@pytest.fixture
def recorded_bus() -> Tuple[EventBus, List[MonitoringEvent]]:
    """An EventBus plus the list of every MonitoringEvent published on it."""
    bus = EventBus()
    received: List[MonitoringEvent] = []
    bus.subscribe(received.append)
    return bus, received
