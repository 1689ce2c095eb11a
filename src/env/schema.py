# EnvProfile and per-subsystem config dataclasses
# src/env/schema.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


DEFAULT_SPECIAL_KEYWORDS: List[str] = ["bot", "help", "attack", "follow", "come"]
DEFAULT_HOSTILE_MOBS: List[str] = ["zombie", "skeleton", "spider", "creeper", "enderman"]


@dataclass
class BotConnection:
    """How the protocol client reaches the game server."""
    host: str = "localhost"
    port: int = 25565
    username: str = "MCPBot"


@dataclass
class ReactionRules:
    """Predicate parameters used by the reaction dispatcher."""
    special_keywords: List[str] = field(
        default_factory=lambda: list(DEFAULT_SPECIAL_KEYWORDS)
    )
    low_health_threshold: float = 10.0
    hostile_mobs: List[str] = field(
        default_factory=lambda: list(DEFAULT_HOSTILE_MOBS)
    )

    def with_bot_name(self, bot_name: Optional[str]) -> "ReactionRules":
        """Return a copy whose keyword list also contains the bot's own name."""
        keywords = list(self.special_keywords)
        if bot_name and bot_name.lower() not in (k.lower() for k in keywords):
            keywords.insert(0, bot_name.lower())
        return ReactionRules(
            special_keywords=keywords,
            low_health_threshold=self.low_health_threshold,
            hostile_mobs=list(self.hostile_mobs),
        )


@dataclass
class MovementConfig:
    """
    Constants for the polling movement controller.

    Durations are milliseconds, distances are blocks.
    """
    sample_interval_ms: float = 100.0
    stuck_threshold_ms: float = 2000.0
    reached_tolerance: float = 0.2
    stuck_movement_threshold: float = 0.1
    default_target_distance: float = 3.0
    default_max_duration_ms: float = 10_000.0


@dataclass
class DecisionConfig:
    """Which decision backend to use for reactions."""
    backend: str = "none"                 # "none" or "llama_cpp"
    model_path: Optional[str] = None
    context_length: int = 4096
    max_tokens: int = 128
    temperature: float = 0.2
    gpu_layers: Optional[int] = None


@dataclass
class LoggingConfig:
    level: str = "INFO"
    events_log_path: Optional[str] = None   # JSONL monitoring log, disabled if None


@dataclass
class EnvProfile:
    """Top-level resolved runtime profile."""
    name: str
    bot: BotConnection
    capacities: Dict[str, int]
    reactions: ReactionRules
    movement: MovementConfig
    decision: DecisionConfig
    logging: LoggingConfig
