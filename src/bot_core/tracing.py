# src/bot_core/tracing.py
"""
Tracing for bot command execution.

A thin, structured logging layer around CommandExecutor so that the
dashboard and tool surface can show what was sent to the bot recently.

It does NOT:
- Call LLMs
- Make control decisions
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional, Sequence


@dataclass
class CommandTraceRecord:
    """Structured record of a single command execution."""

    timestamp: float           # wall-clock time (time.time())
    duration_s: float          # execution duration in seconds

    command: str
    params: List[Any]

    success: bool
    error: Optional[str]

    # Movement runs only
    stop_reason: Optional[str] = None


class CommandTracer:
    """
    In-memory command tracer with logging.

    Responsibilities:
    - Keep a rolling buffer of recent CommandTraceRecord entries.
    - Emit a single structured log line per command (info level).
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        max_records: int = 1_000,
    ) -> None:
        self._logger = logger or logging.getLogger("bot_core.command")
        self._records: Deque[CommandTraceRecord] = deque(maxlen=max_records)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(
        self,
        *,
        command: str,
        params: Sequence[Any],
        success: bool,
        error: Optional[str],
        duration_s: float,
        stop_reason: Optional[str] = None,
    ) -> CommandTraceRecord:
        """
        Record a trace for a completed command.

        Called for failures too; `success` and `error` capture the outcome.
        """
        record = CommandTraceRecord(
            timestamp=time.time(),
            duration_s=duration_s,
            command=command,
            params=list(params),
            success=success,
            error=error,
            stop_reason=stop_reason,
        )
        self._records.append(record)

        self._logger.info(
            "command_exec command=%s params=%r success=%s error=%s duration=%.4fs stop=%s",
            record.command,
            record.params,
            record.success,
            record.error,
            record.duration_s,
            record.stop_reason,
        )
        return record

    def get_records(self) -> List[CommandTraceRecord]:
        """Return a snapshot of all currently buffered records."""
        return list(self._records)
