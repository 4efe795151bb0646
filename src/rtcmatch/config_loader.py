"""Configuration loader and validator."""

from pathlib import Path
from typing import Any

import yaml

from rtcmatch.models import ALLOWED_BRACKET_SIZES

SUPPORTED_SPORTS = ("court-tennis", "racquets", "squash")

DEFAULTS: dict[str, Any] = {
    "random_seed": None,
    "bracket_size": "auto",
    "event_name": "",
    "sport": "court-tennis",
    "max_entries_per_player": 4,
    "team_handicap_limit": 120,
    "previous_winners": [],
}


class ConfigError(Exception):
    """Configuration validation error."""

    pass


def load_config(path: str) -> dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file

    Returns:
        Dictionary with configuration values

    Raises:
        ConfigError: If file not found or invalid YAML
    """
    config_file = Path(path)

    if not config_file.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}")

    if config is None:
        raise ConfigError("Config file is empty")
    if not isinstance(config, dict):
        raise ConfigError("Config file must contain a mapping")

    return config


def validate_config(config: dict[str, Any]) -> dict[str, Any]:
    """Validate configuration values, filling in defaults.

    Args:
        config: Configuration dictionary

    Returns:
        Validated and normalized configuration

    Raises:
        ConfigError: If validation fails
    """
    validated = dict(DEFAULTS)

    # Random seed (optional; None draws differently every time)
    seed = config.get("random_seed")
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ConfigError("random_seed must be an integer")
    validated["random_seed"] = seed

    # Bracket size ("auto" or one of the template sizes)
    size = config.get("bracket_size", "auto")
    if size != "auto" and size not in ALLOWED_BRACKET_SIZES:
        raise ConfigError(f"bracket_size must be 'auto' or one of {list(ALLOWED_BRACKET_SIZES)}, got {size}")
    validated["bracket_size"] = size

    event_name = config.get("event_name", "")
    if not isinstance(event_name, str):
        raise ConfigError("event_name must be a string")
    validated["event_name"] = event_name

    sport = config.get("sport", "court-tennis")
    if sport not in SUPPORTED_SPORTS:
        raise ConfigError(f"sport must be one of {list(SUPPORTED_SPORTS)}, got '{sport}'")
    validated["sport"] = sport

    max_entries = config.get("max_entries_per_player", 4)
    if isinstance(max_entries, bool) or not isinstance(max_entries, int) or max_entries < 1:
        raise ConfigError("max_entries_per_player must be a positive integer")
    validated["max_entries_per_player"] = max_entries

    limit = config.get("team_handicap_limit", 120)
    if isinstance(limit, bool) or not isinstance(limit, (int, float)):
        raise ConfigError("team_handicap_limit must be a number")
    validated["team_handicap_limit"] = limit

    winners = config.get("previous_winners") or []
    if not isinstance(winners, list) or not all(isinstance(w, str) for w in winners):
        raise ConfigError("previous_winners must be a list of names")
    validated["previous_winners"] = winners

    return validated


def load_and_validate_config(path: str) -> dict[str, Any]:
    """Load and validate configuration in one step.

    Args:
        path: Path to YAML config file

    Returns:
        Validated configuration dictionary

    Raises:
        ConfigError: If loading or validation fails
    """
    config = load_config(path)
    return validate_config(config)
