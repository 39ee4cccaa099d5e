"""Chat session state, persistence and orchestration."""

from .models import (
    Message,
    Part,
    PartKind,
    ReasoningPart,
    Role,
    Snapshot,
    Status,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    UnknownPart,
    duration_key,
)
from .events import (
    Done,
    MessageFinalized,
    PartFinalized,
    TokenAppended,
    TransportError,
    TransportEvent,
)
from .store import SnapshotError
from .persistence import PersistenceGate
from .welcome import WelcomeInjector
from .durations import DurationTracker
from .controller import SessionBusyError, SessionController

__all__ = [
    "Message",
    "Part",
    "PartKind",
    "ReasoningPart",
    "Role",
    "Snapshot",
    "Status",
    "TextPart",
    "ToolCallPart",
    "ToolResultPart",
    "UnknownPart",
    "duration_key",
    "Done",
    "MessageFinalized",
    "PartFinalized",
    "TokenAppended",
    "TransportError",
    "TransportEvent",
    "SnapshotError",
    "PersistenceGate",
    "WelcomeInjector",
    "DurationTracker",
    "SessionBusyError",
    "SessionController",
]
