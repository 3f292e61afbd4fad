"""
Defaults loader for tunable constants from YAML files.

Provides a hierarchical configuration system:
1. config/defaults.yaml - Base defaults (checked into repo)
2. config/settings.yaml - User overrides (gitignored)
3. Explicit paths passed by callers (tests, embedding applications)
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

# Cache for loaded config
_config_cache: Optional[Dict[str, Any]] = None
_config_path: Optional[Path] = None


def get_project_root() -> Path:
    """Get the project root directory."""
    # Navigate up from habital/core/defaults_loader.py
    return Path(__file__).parent.parent.parent


def load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """Load a YAML file and return its contents as a dictionary."""
    if not file_path.exists():
        return {}

    with open(file_path, "r", encoding="utf-8") as f:
        content = yaml.safe_load(f)
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"{file_path} must contain a mapping at the top level")
    return content


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def get_nested(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested value from config using dot notation.

    Example:
        get_nested(config, "statistics.score_window_days", 30)
    """
    value: Any = config
    for key in key_path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def load_defaults(
    defaults_path: Optional[Path] = None,
    settings_path: Optional[Path] = None,
    reload: bool = False,
) -> Dict[str, Any]:
    """
    Load configuration from YAML files.

    Args:
        defaults_path: Path to defaults.yaml (optional, uses project default)
        settings_path: Path to settings.yaml (optional, uses project default)
        reload: Force reload even if cached

    Returns:
        Merged configuration dictionary
    """
    global _config_cache, _config_path

    project_root = get_project_root()
    if defaults_path is None:
        defaults_path = project_root / "config" / "defaults.yaml"
    if settings_path is None:
        settings_path = project_root / "config" / "settings.yaml"

    if not reload and _config_cache is not None and _config_path == defaults_path:
        return _config_cache

    config = load_yaml_file(defaults_path)
    user_settings = load_yaml_file(settings_path)
    if user_settings:
        logger.debug("Applying overrides from %s", settings_path)
        config = deep_merge(config, user_settings)

    _config_cache = config
    _config_path = defaults_path
    return config


def get_config_value(key_path: str, default: Any = None) -> Any:
    """
    Get a configuration value using dot notation.

    Args:
        key_path: Dot-separated path like "statistics.score_window_days"
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    return get_nested(load_defaults(), key_path, default)


# Convenience functions for common config sections
def get_statistic(name: str, default: int) -> int:
    """Get an integer constant from the statistics section."""
    return int(get_config_value(f"statistics.{name}", default))


def get_cache_setting(name: str, default: int) -> int:
    """Get an integer constant from the cache section."""
    return int(get_config_value(f"cache.{name}", default))


def get_label(name: str, default: str = "") -> str:
    """Get a display label from config."""
    return str(get_config_value(f"labels.{name}", default))


def clear_cache() -> None:
    """Clear the configuration cache (useful for testing)."""
    global _config_cache, _config_path
    _config_cache = None
    _config_path = None
