"""Assistant transports that feed events into the session controller."""

import logging
import os
import uuid
from typing import AsyncIterator, List, Optional, Protocol, Sequence

from dotenv import load_dotenv
from google import genai
from google.genai import errors, types

from ..config.chat_config import ChatConfig
from ..config.models import ModelConfig, ModelRegistry
from ..prompts import build_system_prompt
from ..session.events import (
    Done,
    MessageFinalized,
    PartFinalized,
    TokenAppended,
    TransportError,
    TransportEvent,
)
from ..session.models import Message, PartKind, Role, ToolCallPart, ToolResultPart

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Streams one assistant reply per user message."""

    def stream(
        self, text: str, history: Sequence[Message]
    ) -> AsyncIterator[TransportEvent]:
        """Yield events for the reply to ``text`` given the prior ``history``."""
        ...

    def cancel(self) -> None:
        """Ask the running stream to stop delivering events."""
        ...


def history_to_contents(history: Sequence[Message]) -> List[types.Content]:
    """Convert transcript messages to Gemini conversation turns.

    Only text parts are replayed; reasoning and tool traffic stay local.
    """
    contents: List[types.Content] = []
    for message in history:
        text = message.text
        if not text.strip():
            continue
        role = "user" if message.role is Role.USER else "model"
        contents.append(types.Content(role=role, parts=[types.Part(text=text)]))
    return contents


class GeminiTransport:
    """Streams replies from a Gemini model through google-genai."""

    def __init__(
        self,
        config: Optional[ChatConfig] = None,
        api_key: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        """Initialize the transport.

        Args:
            config: Chat configuration (model, identity, reasoning)
            api_key: Google API key (falls back to GOOGLE_API_KEY / GEMINI_API_KEY)
            client: Pre-built client, mainly for tests

        Raises:
            ValueError: If no client is given and no API key can be found
        """
        self.config = config or ChatConfig()
        self.model: ModelConfig = ModelRegistry.resolve(self.config.model)
        self._cancelled = False

        if client is None:
            load_dotenv()
            api_key = (
                api_key or os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
            )
            if not api_key:
                raise ValueError(
                    "API key not provided. Set GOOGLE_API_KEY or GEMINI_API_KEY environment variable or add api_key to config.json."
                )
            client = genai.Client(api_key=api_key)
        self._client = client

    def _generation_config(self) -> types.GenerateContentConfig:
        params = {
            "system_instruction": build_system_prompt(self.config),
            "max_output_tokens": self.model.max_output_tokens,
        }
        if self.config.show_reasoning and self.model.supports_thinking:
            params["thinking_config"] = types.ThinkingConfig(include_thoughts=True)
        return types.GenerateContentConfig(**params)

    def cancel(self) -> None:
        self._cancelled = True

    async def stream(
        self, text: str, history: Sequence[Message]
    ) -> AsyncIterator[TransportEvent]:
        self._cancelled = False
        message_id = str(uuid.uuid4())
        part_index = -1
        current_kind: Optional[PartKind] = None

        contents = history_to_contents(history)
        contents.append(types.Content(role="user", parts=[types.Part(text=text)]))

        try:
            response = await self._client.aio.models.generate_content_stream(
                model=self.model.api_id,
                contents=contents,
                config=self._generation_config(),
            )
            async for chunk in response:
                if self._cancelled:
                    logger.debug("Stream %s cancelled", message_id)
                    return
                for part in _chunk_parts(chunk):
                    if part.function_call is not None:
                        part_index += 1
                        current_kind = None
                        call = part.function_call
                        yield PartFinalized(
                            message_id,
                            part_index,
                            ToolCallPart(name=call.name or "", args=dict(call.args or {})),
                        )
                    elif part.function_response is not None:
                        part_index += 1
                        current_kind = None
                        yield PartFinalized(
                            message_id,
                            part_index,
                            ToolResultPart(output=part.function_response.response),
                        )
                    elif part.text:
                        kind = PartKind.REASONING if part.thought else PartKind.TEXT
                        if kind is not current_kind:
                            part_index += 1
                            current_kind = kind
                        yield TokenAppended(message_id, part_index, kind, part.text)
        except errors.APIError as e:
            logger.error(f"Gemini API error: {e}")
            yield TransportError(str(e))
            return

        if part_index >= 0:
            yield MessageFinalized(message_id)
        yield Done()


def _chunk_parts(chunk: types.GenerateContentResponse) -> List[types.Part]:
    if not chunk.candidates:
        return []
    content = chunk.candidates[0].content
    if content is None or not content.parts:
        return []
    return list(content.parts)
