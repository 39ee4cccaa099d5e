"""Tests for pure snapshot operations."""

import pytest

from chatwall.session.models import (
    Message,
    PartKind,
    ReasoningPart,
    Role,
    Snapshot,
    TextPart,
    ToolCallPart,
)
from chatwall.session.store import (
    AppendMessage,
    AppendToPart,
    ClearTranscript,
    FinalizeMessage,
    PutPart,
    SnapshotError,
    apply,
)


def user(message_id="u1", text="hi"):
    return Message(id=message_id, role=Role.USER, parts=(TextPart(text),))


def open_assistant(message_id="a1", parts=()):
    return Message(id=message_id, role=Role.ASSISTANT, parts=parts, finalized=False)


@pytest.fixture
def streaming():
    """Snapshot with a user message and an in-flight assistant message."""
    snapshot = apply(Snapshot.empty(), AppendMessage(user()))
    return apply(snapshot, AppendMessage(open_assistant()))


class TestAppendMessage:
    """Test appending messages."""

    def test_append_keeps_order(self):
        snapshot = apply(Snapshot.empty(), AppendMessage(user("u1")))
        snapshot = apply(snapshot, AppendMessage(user("u2")))
        assert [m.id for m in snapshot.transcript] == ["u1", "u2"]

    def test_input_snapshot_untouched(self):
        empty = Snapshot.empty()
        apply(empty, AppendMessage(user()))
        assert empty.transcript == ()

    def test_duplicate_id_rejected(self):
        snapshot = apply(Snapshot.empty(), AppendMessage(user("u1")))
        with pytest.raises(SnapshotError):
            apply(snapshot, AppendMessage(user("u1")))

    def test_cannot_append_behind_in_flight_message(self, streaming):
        with pytest.raises(SnapshotError):
            apply(streaming, AppendMessage(user("u2")))


class TestStreaming:
    """Test growth of the in-flight message."""

    def test_new_part_then_growth(self, streaming):
        snapshot = apply(streaming, AppendToPart("a1", 0, PartKind.TEXT, "Hel"))
        snapshot = apply(snapshot, AppendToPart("a1", 0, PartKind.TEXT, "lo"))
        assert snapshot.last_message.parts == (TextPart("Hello"),)
        assert snapshot.last_message.finalized is False

    def test_reasoning_then_text(self, streaming):
        snapshot = apply(streaming, AppendToPart("a1", 0, PartKind.REASONING, "hmm"))
        snapshot = apply(snapshot, AppendToPart("a1", 1, PartKind.TEXT, "Answer"))
        assert snapshot.last_message.parts == (
            ReasoningPart("hmm"),
            TextPart("Answer"),
        )

    def test_kind_mismatch_rejected(self, streaming):
        snapshot = apply(streaming, AppendToPart("a1", 0, PartKind.TEXT, "a"))
        with pytest.raises(SnapshotError):
            apply(snapshot, AppendToPart("a1", 0, PartKind.REASONING, "b"))

    def test_gap_in_part_index_rejected(self, streaming):
        with pytest.raises(SnapshotError):
            apply(streaming, AppendToPart("a1", 2, PartKind.TEXT, "a"))

    def test_put_part_appends_and_replaces(self, streaming):
        call = ToolCallPart(name="search", args={"q": "paneer"})
        snapshot = apply(streaming, PutPart("a1", 0, call))
        assert snapshot.last_message.parts == (call,)

        replaced = apply(snapshot, PutPart("a1", 0, TextPart("done")))
        assert replaced.last_message.parts == (TextPart("done"),)

    def test_streaming_into_unknown_message_rejected(self, streaming):
        with pytest.raises(SnapshotError):
            apply(streaming, AppendToPart("zzz", 0, PartKind.TEXT, "a"))

    def test_only_last_message_can_grow(self):
        snapshot = apply(Snapshot.empty(), AppendMessage(user("u1")))
        snapshot = apply(snapshot, AppendMessage(user("u2")))
        with pytest.raises(SnapshotError):
            apply(snapshot, AppendToPart("u1", 1, PartKind.TEXT, "x"))


class TestFinalize:
    """Test finalization rules."""

    def test_finalized_message_is_frozen(self, streaming):
        snapshot = apply(streaming, AppendToPart("a1", 0, PartKind.TEXT, "Hi"))
        snapshot = apply(snapshot, FinalizeMessage("a1"))
        assert snapshot.last_message.finalized is True

        with pytest.raises(SnapshotError):
            apply(snapshot, AppendToPart("a1", 0, PartKind.TEXT, "!"))
        with pytest.raises(SnapshotError):
            apply(snapshot, PutPart("a1", 1, TextPart("more")))

    def test_finalize_is_idempotent(self, streaming):
        once = apply(streaming, FinalizeMessage("a1"))
        twice = apply(once, FinalizeMessage("a1"))
        assert twice is once

    def test_finalize_unknown_message_rejected(self):
        with pytest.raises(SnapshotError):
            apply(Snapshot.empty(), FinalizeMessage("nope"))


def test_clear_empties_transcript_and_durations():
    snapshot = Snapshot(transcript=(user(),), durations={"u1-0": 10})
    cleared = apply(snapshot, ClearTranscript())
    assert cleared == Snapshot.empty()
    assert cleared.durations == {}


def test_same_ops_give_same_snapshot():
    ops = [
        AppendMessage(user()),
        AppendMessage(open_assistant()),
        AppendToPart("a1", 0, PartKind.TEXT, "x"),
        FinalizeMessage("a1"),
    ]
    first = Snapshot.empty()
    second = Snapshot.empty()
    for op in ops:
        first = apply(first, op)
        second = apply(second, op)
    assert first == second
