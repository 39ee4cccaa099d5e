"""Events delivered by a transport while an assistant turn streams."""

from dataclasses import dataclass
from typing import Union

from .models import Part, PartKind


@dataclass(frozen=True)
class TokenAppended:
    """A chunk of text or reasoning for ``part_index`` of ``message_id``."""

    message_id: str
    part_index: int
    kind: PartKind
    delta: str


@dataclass(frozen=True)
class PartFinalized:
    """A complete part (tool call, tool result or a settled text block)."""

    message_id: str
    part_index: int
    part: Part


@dataclass(frozen=True)
class MessageFinalized:
    """The assistant message will receive no more parts."""

    message_id: str


@dataclass(frozen=True)
class TransportError:
    """The transport failed; ``message`` is a human-readable reason."""

    message: str


@dataclass(frozen=True)
class Done:
    """The turn completed."""


TransportEvent = Union[TokenAppended, PartFinalized, MessageFinalized, TransportError, Done]
