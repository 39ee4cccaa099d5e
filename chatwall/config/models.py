"""Centralized model configuration for chatwall."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelConfig:
    """Configuration metadata for a Gemini model."""

    id: str
    full_id: str
    display_name: str
    description: str
    max_output_tokens: int
    supports_thinking: bool

    @property
    def api_id(self) -> str:
        """Return the identifier that should be sent to the API."""

        return self.full_id or self.id


class ModelRegistry:
    """Registry providing a single source of truth for Gemini models."""

    FLASH_LATEST = ModelConfig(
        id="gemini-flash-latest",
        full_id="gemini-flash-latest",
        display_name="Gemini Flash (Latest)",
        description="Latest Flash model, fast responses with optional thinking.",
        max_output_tokens=65_536,
        supports_thinking=True,
    )

    FLASH_LITE_LATEST = ModelConfig(
        id="gemini-flash-lite-latest",
        full_id="gemini-flash-lite-latest",
        display_name="Gemini Flash Lite (Latest)",
        description="Small workhorse model, optimized for cost efficiency and low latency.",
        max_output_tokens=8_192,
        supports_thinking=False,
    )

    PRO_25 = ModelConfig(
        id="gemini-2.5-pro",
        full_id="gemini-2.5-pro",
        display_name="Gemini 2.5 Pro",
        description="Thinking model for complex reasoning over long recipes and meal plans.",
        max_output_tokens=65_536,
        supports_thinking=True,
    )

    _ALL_MODELS: Tuple[ModelConfig, ...] = (
        FLASH_LATEST,
        FLASH_LITE_LATEST,
        PRO_25,
    )

    # Short names users tend to type in config.json
    _ALIASES: Dict[str, str] = {
        "gemini-flash": "gemini-flash-latest",
        "gemini-2.5-flash": "gemini-flash-latest",
        "gemini-flash-lite": "gemini-flash-lite-latest",
        "gemini-pro": "gemini-2.5-pro",
    }

    DEFAULT = FLASH_LATEST

    @classmethod
    def all_models(cls) -> Tuple[ModelConfig, ...]:
        """Return all registered models."""

        return cls._ALL_MODELS

    @classmethod
    def get_by_id(cls, model_id: Optional[str]) -> Optional[ModelConfig]:
        """Return configuration for ``model_id`` (or an alias) if available."""

        if not model_id:
            return None

        clean_id = model_id.removeprefix("models/")
        clean_id = cls._ALIASES.get(clean_id, clean_id)
        for model in cls._ALL_MODELS:
            if model.id == clean_id:
                return model
        return None

    @classmethod
    def resolve(cls, model_id: Optional[str]) -> ModelConfig:
        """Return the model for ``model_id``, falling back to the default.

        Unknown identifiers are logged and replaced rather than rejected so a
        typo in config.json never prevents the chat from starting.
        """
        env_model = os.environ.get("CHATWALL_MODEL")
        if env_model:
            model = cls.get_by_id(env_model)
            if model:
                return model
            LOGGER.warning("Invalid CHATWALL_MODEL=%s, falling back to defaults", env_model)

        if not model_id:
            return cls.DEFAULT

        model = cls.get_by_id(model_id)
        if model is None:
            LOGGER.warning("Unknown model '%s', using %s", model_id, cls.DEFAULT.id)
            return cls.DEFAULT
        return model
