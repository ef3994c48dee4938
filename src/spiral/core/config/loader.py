"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import SpiralConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per session
_config_cache: SpiralConfig | None = None

# Environment variable → config key
ENV_OVERRIDES = {
    "SPIRAL_ROADMAP": "roadmap_file",
    "SPIRAL_STATE_DIR": "state_dir",
    "SPIRAL_FAMILY": "default_family",
    "SPIRAL_COMMIT_FAMILY": "commit_family",
    "SPIRAL_SORT": "sort_order",
}


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """Path to ~/.config/spiral/config.json (or XDG equivalent)."""
    return get_xdg_config_home() / "spiral" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .spiral.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".spiral.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`. Nested dicts
    are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 20}})
        {'a': 1, 'b': {'x': 10, 'y': 20}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            logger.warning("Ignoring config at %s: top level is not an object", path)
            return None
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        SPIRAL_ROADMAP - overrides roadmap_file
        SPIRAL_STATE_DIR - overrides state_dir
        SPIRAL_FAMILY - overrides default_family
        SPIRAL_COMMIT_FAMILY - overrides commit_family
        SPIRAL_SORT - overrides sort_order ("text" or "natural")
    """
    result = config_dict.copy()
    for env_var, key in ENV_OVERRIDES.items():
        if value := os.environ.get(env_var):
            result[key] = value
    return result


def get_default_config() -> dict[str, Any]:
    """Hardcoded defaults, taken from the model."""
    return SpiralConfig().model_dump(mode="json")


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> SpiralConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (SPIRAL_*)
        2. Project config (.spiral.json)
        3. User config (~/.config/spiral/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .spiral.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated SpiralConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = SpiralConfig(**merged)
    _config_cache = config
    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
