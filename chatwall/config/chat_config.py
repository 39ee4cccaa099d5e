"""Chat options that used to be forked per-screen variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple

from .settings_manager import DEFAULT_THEME, load_config_data, validate_theme

LOGGER = logging.getLogger(__name__)

DEFAULT_AI_NAME = "Recipe Buddy"
DEFAULT_OWNER_NAME = "chatwall"
DEFAULT_STORAGE_KEY = "chat-messages"
DEFAULT_WELCOME_MESSAGE = (
    "Hi! I'm your cooking assistant. Tell me what's in your kitchen or what "
    "you're craving, and I'll help you put a recipe together."
)
DEFAULT_QUICK_PROMPTS: Tuple[str, ...] = (
    "Quick Indian breakfast with oats",
    "Simple Italian pasta dinner",
    "3-dish North Indian thali",
    "Healthy vegetarian lunchbox",
    "Mexican chicken dinner < 30 min",
)


@dataclass(frozen=True)
class ChatConfig:
    """Explicit configuration for one chat surface."""

    ai_name: str = DEFAULT_AI_NAME
    owner_name: str = DEFAULT_OWNER_NAME
    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    welcome_enabled: bool = True
    clear_chat_text: str = "New chat"
    quick_prompts: Tuple[str, ...] = field(default=DEFAULT_QUICK_PROMPTS)
    storage_key: str = DEFAULT_STORAGE_KEY
    model: Optional[str] = None
    show_reasoning: bool = True
    theme: str = DEFAULT_THEME

    def with_overrides(self, **overrides: Any) -> "ChatConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _coerce(name: str, value: Any, default: Any) -> Any:
    """Return ``value`` if it has the same shape as ``default``, else ``None``."""
    if isinstance(default, tuple):
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return tuple(value)
        return None
    if isinstance(default, bool):
        return value if isinstance(value, bool) else None
    if name == "model":
        return value if isinstance(value, str) and value else None
    if isinstance(default, str):
        return value if isinstance(value, str) and value.strip() else None
    return None


def chat_config_from_dict(data: Dict[str, Any]) -> ChatConfig:
    """Build a ChatConfig from raw settings, ignoring unknown or mistyped keys."""
    base = ChatConfig()
    values: Dict[str, Any] = {}
    for f in fields(ChatConfig):
        if f.name not in data:
            continue
        coerced = _coerce(f.name, data[f.name], getattr(base, f.name))
        if coerced is None:
            LOGGER.warning("Ignoring invalid value for setting '%s'", f.name)
            continue
        values[f.name] = coerced

    theme = values.get("theme")
    if theme is not None and not validate_theme(theme):
        LOGGER.warning("Unknown theme '%s', using %s", theme, DEFAULT_THEME)
        values.pop("theme")

    return replace(base, **values)


def load_chat_config() -> ChatConfig:
    """Load the chat configuration from config.json merged over defaults."""
    return chat_config_from_dict(load_config_data())
