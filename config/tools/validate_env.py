# config/tools/validate_env.py

import sys           # for exit codes
from dataclasses import asdict
from pprint import pprint  # for structured printing

import yaml          # loader parse errors

# make src discoverable if running as a script
from pathlib import Path
# __file__ is .../config/tools/validate_env.py
# parents[2] is the project root; append ROOT/src
PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT / "src"))

from env.loader import load_environment, resolve_config_path  # import our loader


def main() -> None:
    """Load and print the resolved environment, failing fast on errors."""
    try:
        env = load_environment()             # resolve the active profile
    except (OSError, KeyError, TypeError, ValueError, yaml.YAMLError) as e:
        print("Environment validation FAILED:", file=sys.stderr)
        print(repr(e), file=sys.stderr)
        sys.exit(1)                          # non-zero exit: CI will mark as failed

    print("Environment validation OK.")
    print("\nConfig file:", resolve_config_path())
    print("\nActive profile:", env.name)
    print("\nBot connection:")
    pprint(asdict(env.bot))
    print("\nEvent capacities:")
    pprint(env.capacities)
    print("\nReaction rules:")
    pprint(asdict(env.reactions))
    print("\nMovement:")
    pprint(asdict(env.movement))
    print("\nDecision backend:")
    pprint(asdict(env.decision))


if __name__ == "__main__":
    main()  # run main() only when script is executed directly
