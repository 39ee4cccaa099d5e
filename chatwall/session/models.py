"""Data models for chat transcripts and their persisted snapshot."""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple, Union

logger = logging.getLogger(__name__)


class Role(Enum):
    """Who authored a message."""

    USER = "user"
    ASSISTANT = "assistant"


class PartKind(Enum):
    """Types of message parts, valued by their wire ``type`` tag."""

    TEXT = "text"
    REASONING = "reasoning"
    TOOL_CALL = "tool-call"
    TOOL_RESULT = "tool-result"
    UNKNOWN = "unknown"  # Any type tag this client does not understand

    @property
    def is_streamable(self) -> bool:
        """Whether parts of this kind grow token by token."""
        return self in (PartKind.TEXT, PartKind.REASONING)


class Status(Enum):
    """Lifecycle of the current assistant turn."""

    IDLE = "idle"  # Nothing sent since hydration or clear
    SUBMITTED = "submitted"  # User message sent, nothing received yet
    STREAMING = "streaming"  # Assistant message growing
    READY = "ready"  # Turn completed or cancelled
    ERROR = "error"  # Transport failed mid-turn

    @property
    def is_busy(self) -> bool:
        """Whether a turn is in flight."""
        return self in (Status.SUBMITTED, Status.STREAMING)


@dataclass(frozen=True)
class TextPart:
    """Plain assistant or user text."""

    content: str = ""
    kind: PartKind = field(default=PartKind.TEXT, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "text": self.content}


@dataclass(frozen=True)
class ReasoningPart:
    """A model thinking trace."""

    content: str = ""
    kind: PartKind = field(default=PartKind.REASONING, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "text": self.content}


@dataclass(frozen=True)
class ToolCallPart:
    """A tool invocation requested by the model."""

    name: str
    args: Dict[str, Any] = field(default_factory=dict)
    kind: PartKind = field(default=PartKind.TOOL_CALL, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "name": self.name, "args": _json_safe(self.args)}


@dataclass(frozen=True)
class ToolResultPart:
    """Output returned by a tool."""

    output: Any = None
    kind: PartKind = field(default=PartKind.TOOL_RESULT, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "output": _json_safe(self.output)}


@dataclass(frozen=True)
class UnknownPart:
    """A stored part whose type this client cannot interpret.

    It is kept verbatim so part indexes (and the duration keys built from
    them) stay stable and the data survives a load and save.
    """

    raw: Dict[str, Any] = field(default_factory=dict)
    kind: PartKind = field(default=PartKind.UNKNOWN, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return _json_safe(self.raw)


Part = Union[TextPart, ReasoningPart, ToolCallPart, ToolResultPart, UnknownPart]


def _json_safe(value: Any) -> Any:
    """Return ``value`` with anything JSON can't encode replaced by its str()."""
    return json.loads(json.dumps(value, default=str))


def part_from_dict(data: Dict[str, Any]) -> Part:
    """Create a part from its wire representation.

    Type tags this client does not know become an UnknownPart.

    Raises:
        ValueError: If the part is not an object or a known part is malformed
    """
    if not isinstance(data, dict):
        raise ValueError(f"Part must be an object, got {type(data).__name__}")

    try:
        kind = PartKind(data.get("type"))
    except ValueError:
        kind = PartKind.UNKNOWN
    if kind is PartKind.UNKNOWN:
        return UnknownPart(raw=dict(data))
    if kind is PartKind.TOOL_CALL:
        name = data.get("name")
        args = data.get("args") or {}
        if not isinstance(name, str) or not isinstance(args, dict):
            raise ValueError("tool-call part needs a string name and object args")
        return ToolCallPart(name=name, args=args)
    if kind is PartKind.TOOL_RESULT:
        return ToolResultPart(output=data.get("output"))

    text = data.get("text", "")
    if not isinstance(text, str):
        raise ValueError(f"{kind.value} part text must be a string")
    if kind is PartKind.REASONING:
        return ReasoningPart(content=text)
    return TextPart(content=text)


def make_part(kind: PartKind, content: str = "") -> Part:
    """Create an empty (or seeded) streamable part of ``kind``."""
    if kind is PartKind.TEXT:
        return TextPart(content=content)
    if kind is PartKind.REASONING:
        return ReasoningPart(content=content)
    raise ValueError(f"{kind.value} parts are not streamed token by token")


@dataclass(frozen=True)
class Message:
    """One turn of the conversation.

    ``finalized`` is in-memory only: it is not written to storage and is
    ignored by equality, so a reloaded in-flight message compares equal to
    the one that was saved.
    """

    id: str
    role: Role
    parts: Tuple[Part, ...] = ()
    finalized: bool = field(default=True, compare=False)

    @property
    def text(self) -> str:
        """Concatenated text parts (reasoning and tools excluded)."""
        return "".join(p.content for p in self.parts if p.kind is PartKind.TEXT)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "role": self.role.value,
            "parts": [part.to_dict() for part in self.parts],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """Create from dictionary.

        Parts are parsed one by one: a malformed part object is kept as an
        UnknownPart so later part indexes don't shift, and a non-object
        entry is skipped.

        Raises:
            ValueError: If id, role or the parts list is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Message must be an object, got {type(data).__name__}")
        message_id = data.get("id")
        if not isinstance(message_id, str) or not message_id:
            raise ValueError("Message id must be a non-empty string")
        parts = data.get("parts") or []
        if not isinstance(parts, list):
            raise ValueError("Message parts must be a list")
        role = Role(data.get("role"))

        parsed = []
        for index, raw in enumerate(parts):
            if not isinstance(raw, dict):
                logger.warning(f"Skipping part #{index} of message {message_id}: not an object")
                continue
            try:
                parsed.append(part_from_dict(raw))
            except ValueError as e:
                logger.warning(f"Keeping unreadable part #{index} of message {message_id}: {e}")
                parsed.append(UnknownPart(raw=dict(raw)))
        return cls(id=message_id, role=role, parts=tuple(parsed))


def duration_key(message_id: str, part_index: int) -> str:
    """Build the compound duration key ``"<messageId>-<partIndex>"``."""
    return f"{message_id}-{part_index}"


@dataclass(frozen=True)
class Snapshot:
    """Transcript plus duration map; the unit of persistence."""

    transcript: Tuple[Message, ...] = ()
    durations: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.transcript

    @property
    def last_message(self):
        return self.transcript[-1] if self.transcript else None

    def find(self, message_id: str):
        """Return ``(index, message)`` for ``message_id`` or ``(None, None)``."""
        for index, message in enumerate(self.transcript):
            if message.id == message_id:
                return index, message
        return None, None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the storage JSON shape."""
        return {
            "messages": [message.to_dict() for message in self.transcript],
            "durations": dict(self.durations),
        }
