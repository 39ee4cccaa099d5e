"""Centralized settings management for chatwall.

Settings Schema:
    {
        "ai_name": str,              # Assistant display name
        "owner_name": str,           # Who runs the assistant (shown in prompts/footer)
        "welcome_message": str,      # Text of the one-time greeting
        "welcome_enabled": bool,     # Whether empty sessions get a greeting
        "clear_chat_text": str,      # Label of the clear action
        "quick_prompts": [str],      # Suggestions shown above the input
        "storage_key": str,          # Name of the durable transcript slot
        "model": str,                # Model ID (e.g., "gemini-flash-latest")
        "show_reasoning": bool,      # Ask the model for thinking parts
        "api_key": str,              # Google API key for Gemini models
        "theme": str,                # Theme name (e.g., "textual-dark", "nord")
    }
"""

import json
from typing import Any, Dict
import logging

from chatwall.core.config_paths import ConfigPaths

LOGGER = logging.getLogger(__name__)

# Default theme if none is saved
DEFAULT_THEME = "textual-dark"

# Valid Textual theme names (all built-in themes)
VALID_THEMES = {
    "textual-dark",
    "textual-light",
    "nord",
    "gruvbox",
    "dracula",
    "tokyo-night",
    "catppuccin-mocha",
    "catppuccin-latte",
    "monokai",
    "solarized-light",
    "flexoki",
    "textual-ansi",
}


def load_config_data() -> Dict[str, Any]:
    """Read config.json, treating a missing or unreadable file as empty."""
    config_file = ConfigPaths.get_config_file()
    try:
        content = config_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        LOGGER.warning(f"Could not read {config_file}: {e}. Using defaults.")
        return {}

    if not content.strip():
        return {}
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        LOGGER.warning(f"Config file is not valid JSON: {e}. Using defaults.")
        return {}
    if not isinstance(data, dict):
        LOGGER.warning("Config file does not hold an object. Using defaults.")
        return {}
    return data


def _save_config_data(data: Dict[str, Any]) -> bool:
    """Write ``data`` to config.json, returning False if the write failed."""
    config_file = ConfigPaths.get_config_file()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(
            json.dumps(data, indent=4, sort_keys=True), encoding="utf-8"
        )
    except OSError as e:
        LOGGER.error(f"Failed to save config file: {e}", exc_info=True)
        return False
    return True


def get_setting(key: str, default: Any = None) -> Any:
    """Retrieve a setting from the config file."""
    data = load_config_data()
    return data.get(key, default)


def set_settings(updates: Dict[str, Any]) -> bool:
    """Merge ``updates`` into the saved settings.

    Keys whose value is None are removed instead of stored.
    """
    data = load_config_data()
    for key, value in updates.items():
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
    return _save_config_data(data)


def validate_theme(theme: str) -> bool:
    """Check if a theme name is valid.

    Args:
        theme: Theme name to validate

    Returns:
        True if theme is a valid Textual theme name
    """
    return theme in VALID_THEMES


def get_theme_setting() -> str:
    """Retrieve the saved theme setting, falling back to default.

    Returns:
        A valid theme name. If the saved theme is invalid, returns DEFAULT_THEME.
    """
    theme = get_setting("theme", DEFAULT_THEME)
    # Validate and fallback to default if invalid
    return theme if validate_theme(theme) else DEFAULT_THEME
