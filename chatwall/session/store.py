"""Pure transcript operations.

Every operation takes a Snapshot and returns a new one; the input is never
modified. Only the last message of a transcript may be in flight, and a
finalized message is never touched again.
"""

from dataclasses import dataclass, replace
from typing import Union

from .models import Message, Part, PartKind, Snapshot, make_part


class SnapshotError(ValueError):
    """An operation would break a transcript invariant."""


@dataclass(frozen=True)
class AppendMessage:
    message: Message


@dataclass(frozen=True)
class AppendToPart:
    message_id: str
    part_index: int
    kind: PartKind
    delta: str


@dataclass(frozen=True)
class PutPart:
    message_id: str
    part_index: int
    part: Part


@dataclass(frozen=True)
class FinalizeMessage:
    message_id: str


@dataclass(frozen=True)
class ClearTranscript:
    pass


StoreOp = Union[AppendMessage, AppendToPart, PutPart, FinalizeMessage, ClearTranscript]


def apply(snapshot: Snapshot, op: StoreOp) -> Snapshot:
    """Apply ``op`` to ``snapshot`` and return the resulting Snapshot.

    Raises:
        SnapshotError: If the operation violates a transcript invariant
    """
    if isinstance(op, AppendMessage):
        return _append_message(snapshot, op.message)
    if isinstance(op, AppendToPart):
        return _append_to_part(snapshot, op)
    if isinstance(op, PutPart):
        return _put_part(snapshot, op)
    if isinstance(op, FinalizeMessage):
        return _finalize(snapshot, op.message_id)
    if isinstance(op, ClearTranscript):
        return Snapshot.empty()
    raise SnapshotError(f"Unknown operation: {op!r}")


def _append_message(snapshot: Snapshot, message: Message) -> Snapshot:
    last = snapshot.last_message
    if last is not None and not last.finalized:
        raise SnapshotError(f"Message {last.id} is still in flight")
    index, _ = snapshot.find(message.id)
    if index is not None:
        raise SnapshotError(f"Duplicate message id: {message.id}")
    return replace(snapshot, transcript=snapshot.transcript + (message,))


def _in_flight(snapshot: Snapshot, message_id: str) -> Message:
    """Return the last message if it is ``message_id`` and still open."""
    last = snapshot.last_message
    if last is None or last.id != message_id:
        index, _ = snapshot.find(message_id)
        if index is None:
            raise SnapshotError(f"Unknown message: {message_id}")
        raise SnapshotError(f"Message {message_id} is not the last message")
    if last.finalized:
        raise SnapshotError(f"Message {message_id} is finalized")
    return last


def _with_last(snapshot: Snapshot, message: Message) -> Snapshot:
    return replace(snapshot, transcript=snapshot.transcript[:-1] + (message,))


def _append_to_part(snapshot: Snapshot, op: AppendToPart) -> Snapshot:
    message = _in_flight(snapshot, op.message_id)
    parts = message.parts

    if op.part_index == len(parts):
        try:
            new_part = make_part(op.kind, op.delta)
        except ValueError as e:
            raise SnapshotError(str(e)) from e
        return _with_last(snapshot, replace(message, parts=parts + (new_part,)))

    if not 0 <= op.part_index < len(parts):
        raise SnapshotError(
            f"Part index {op.part_index} out of range for message {message.id}"
        )

    current = parts[op.part_index]
    if current.kind is not op.kind:
        raise SnapshotError(
            f"Part {op.part_index} of {message.id} is {current.kind.value}, "
            f"not {op.kind.value}"
        )
    grown = replace(current, content=current.content + op.delta)
    new_parts = parts[: op.part_index] + (grown,) + parts[op.part_index + 1 :]
    return _with_last(snapshot, replace(message, parts=new_parts))


def _put_part(snapshot: Snapshot, op: PutPart) -> Snapshot:
    message = _in_flight(snapshot, op.message_id)
    parts = message.parts

    if op.part_index == len(parts):
        return _with_last(snapshot, replace(message, parts=parts + (op.part,)))
    if not 0 <= op.part_index < len(parts):
        raise SnapshotError(
            f"Part index {op.part_index} out of range for message {message.id}"
        )
    new_parts = parts[: op.part_index] + (op.part,) + parts[op.part_index + 1 :]
    return _with_last(snapshot, replace(message, parts=new_parts))


def _finalize(snapshot: Snapshot, message_id: str) -> Snapshot:
    index, message = snapshot.find(message_id)
    if index is None:
        raise SnapshotError(f"Unknown message: {message_id}")
    if message.finalized:
        return snapshot
    transcript = list(snapshot.transcript)
    transcript[index] = replace(message, finalized=True)
    return replace(snapshot, transcript=tuple(transcript))
