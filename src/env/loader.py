from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from events.categories import resolve_capacities

from .schema import (
    BotConnection,
    DecisionConfig,
    EnvProfile,
    LoggingConfig,
    MovementConfig,
    ReactionRules,
)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_ROOT / "agent.yaml"

# Points at an alternative agent.yaml (tests, deployments).
CONFIG_ENV_VAR = "BOT_AGENT_CONFIG"

VALID_BACKENDS = ("none", "llama_cpp")


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file and check that it is a mapping."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _select_profile(cfg: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    """Return (active_profile_name, active_profile_mapping)."""
    profile_name = cfg.get("profile")
    if not profile_name:
        raise ValueError("agent.yaml must define a 'profile' key.")
    profiles = cfg.get("profiles")
    if not isinstance(profiles, dict):
        raise ValueError("agent.yaml must define a 'profiles' mapping.")
    if profile_name not in profiles:
        raise KeyError(f"Profile '{profile_name}' not found in agent.yaml profiles.")
    return profile_name, profiles[profile_name] or {}


def _section(profile: Mapping[str, Any], key: str) -> Dict[str, Any]:
    raw = profile.get(key) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Section '{key}' must be a mapping, got {type(raw)}")
    return raw


def _parse_capacities(raw: Mapping[str, Any]) -> Dict[str, int]:
    capacities: Dict[str, int] = {}
    for name, value in raw.items():
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(
                f"Capacity for category '{name}' must be a positive integer, got {value!r}"
            )
        capacities[str(name)] = value
    # Unknown category names fail here rather than when the buffer is built.
    resolve_capacities(capacities)
    return capacities


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve_config_path(path: Optional[Path] = None) -> Path:
    if path is not None:
        return Path(path)
    override = os.getenv(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_CONFIG_PATH


def load_environment(path: Optional[Path] = None) -> EnvProfile:
    """Main entry point: returns a fully resolved EnvProfile."""
    cfg = _load_yaml(resolve_config_path(path))
    profile_name, profile = _select_profile(cfg)

    bot_raw = _section(profile, "bot")
    bot = BotConnection(
        host=bot_raw.get("host", "localhost"),
        port=int(bot_raw.get("port", 25565)),
        username=bot_raw.get("username", "MCPBot"),
    )

    capacities = _parse_capacities(_section(profile, "capacities"))

    reactions_raw = _section(profile, "reactions")
    defaults = ReactionRules()
    reactions = ReactionRules(
        special_keywords=list(reactions_raw.get("special_keywords", defaults.special_keywords)),
        low_health_threshold=float(
            reactions_raw.get("low_health_threshold", defaults.low_health_threshold)
        ),
        hostile_mobs=list(reactions_raw.get("hostile_mobs", defaults.hostile_mobs)),
    )

    # Unknown keys in the movement section are a config typo; let it raise.
    movement = MovementConfig(**_section(profile, "movement"))
    decision = DecisionConfig(**_section(profile, "decision"))
    logging_cfg = LoggingConfig(**_section(profile, "logging"))

    _validate_env(movement, decision)

    return EnvProfile(
        name=profile_name,
        bot=bot,
        capacities=capacities,
        reactions=reactions,
        movement=movement,
        decision=decision,
        logging=logging_cfg,
    )


def _validate_env(movement: MovementConfig, decision: DecisionConfig) -> None:
    """Minimal sanity checks for the environment."""
    for name in (
        "sample_interval_ms",
        "stuck_threshold_ms",
        "default_target_distance",
        "default_max_duration_ms",
    ):
        if getattr(movement, name) <= 0:
            raise ValueError(f"movement.{name} must be > 0")

    if decision.backend not in VALID_BACKENDS:
        raise ValueError(f"Invalid decision backend: {decision.backend}")
    if decision.backend == "llama_cpp" and not decision.model_path:
        raise ValueError("decision.model_path is required for the llama_cpp backend")
