"""Configuration utilities for the chatwall application."""

from .chat_config import ChatConfig, chat_config_from_dict, load_chat_config
from .models import ModelConfig, ModelRegistry
from .settings_manager import (
    get_setting,
    set_settings,
    get_theme_setting,
    load_config_data,
    validate_theme,
    DEFAULT_THEME,
    VALID_THEMES,
)

__all__ = [
    # Chat surface configuration
    "ChatConfig",
    "chat_config_from_dict",
    "load_chat_config",
    # Model configuration
    "ModelConfig",
    "ModelRegistry",
    # Settings management
    "get_setting",
    "set_settings",
    "get_theme_setting",
    "load_config_data",
    "validate_theme",
    "DEFAULT_THEME",
    "VALID_THEMES",
]
