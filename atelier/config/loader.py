"""TOML configuration loader.

Reads config/default.toml, deep-merges config/{ATELIER_ENV}.toml on top
and normalizes the result before it reaches Settings:

- `[models.generators.<name>]` tables must name a known model consumer,
  so a typo fails at startup instead of silently using the defaults.
- A relative `[prompts] directory` is resolved against the config
  directory, so the service finds its templates from any cwd.

Environment variables are applied later by Settings and are not
normalized here.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from atelier.intents import Intent

# Model consumers that are not intents; each reads its own generator table
AUXILIARY_MODEL_CONSUMERS = frozenset({
    "ask_user_info",
    "intent_classification",
    "profile_inference",
    "memory_extraction",
    "wardrobe_index",
})

MODEL_CONSUMERS = frozenset(i.value for i in Intent) | AUXILIARY_MODEL_CONSUMERS


def get_config_dir() -> Path:
    """Get the configuration directory path.

    The config directory can be overridden with ATELIER_CONFIG_DIR.
    Defaults to the nearest 'config/' found walking up from the cwd.
    """
    config_dir_env = os.environ.get("ATELIER_CONFIG_DIR")
    if config_dir_env:
        path = Path(config_dir_env)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {config_dir_env}")
        return path

    current = Path.cwd()
    for candidate in [current, *current.parents][:5]:
        if (candidate / "config" / "default.toml").exists():
            return candidate / "config"

    return Path("config")


def get_environment() -> str:
    """Get the current environment from ATELIER_ENV, default 'development'."""
    return os.environ.get("ATELIER_ENV", "development")


def load_toml(file_path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents as a dictionary.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    Per-generator tables merge key by key, so an environment file can
    change one generator's effort without restating its model.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def check_generator_names(config: dict[str, Any]) -> None:
    """Reject generator tables that no model consumer reads.

    Raises:
        ValueError: If `[models.generators]` names an unknown consumer
    """
    generators = config.get("models", {}).get("generators", {})
    unknown = sorted(set(generators) - MODEL_CONSUMERS)
    if unknown:
        raise ValueError(
            f"Unknown generator(s) in [models.generators]: {', '.join(unknown)}. "
            f"Known: {', '.join(sorted(MODEL_CONSUMERS))}"
        )


def resolve_prompt_dir(config: dict[str, Any], config_dir: Path) -> dict[str, Any]:
    """Return config with a relative prompts.directory made absolute."""
    directory = config.get("prompts", {}).get("directory")
    if not directory or Path(directory).is_absolute():
        return config
    resolved = (config_dir / directory).resolve()
    return deep_merge(config, {"prompts": {"directory": str(resolved)}})


def load_config() -> dict[str, Any]:
    """Load and normalize configuration from TOML files.

    Loading order:
    1. config/default.toml (required)
    2. config/{ATELIER_ENV}.toml (optional)

    Raises:
        FileNotFoundError: If default.toml is missing
        ValueError: If a generator table names an unknown consumer
    """
    config_dir = get_config_dir()

    default_path = config_dir / "default.toml"
    if not default_path.exists():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            "Create config/default.toml or set ATELIER_CONFIG_DIR."
        )
    config = load_toml(default_path)

    env_path = config_dir / f"{get_environment()}.toml"
    if env_path.exists():
        config = deep_merge(config, load_toml(env_path))

    check_generator_names(config)
    return resolve_prompt_dir(config, config_dir)
