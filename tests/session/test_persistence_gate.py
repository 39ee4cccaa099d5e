"""Tests for the durable snapshot slot."""

import json
from unittest.mock import patch

import pytest

from chatwall.session.models import (
    Message,
    ReasoningPart,
    Role,
    Snapshot,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    UnknownPart,
)
from chatwall.session.persistence import PersistenceGate


@pytest.fixture
def gate(tmp_path):
    return PersistenceGate(tmp_path / "chat-messages.json")


def sample_snapshot(in_flight=False):
    return Snapshot(
        transcript=(
            Message(id="welcome-1", role=Role.ASSISTANT, parts=(TextPart("Hi!"),)),
            Message(id="m1", role=Role.USER, parts=(TextPart("pasta?"),)),
            Message(
                id="m2",
                role=Role.ASSISTANT,
                parts=(
                    ReasoningPart("thinking about pasta"),
                    ToolCallPart(name="search", args={"q": "pasta"}),
                    ToolResultPart(output={"hits": 3}),
                    TextPart("Try cacio e pepe."),
                ),
                finalized=not in_flight,
            ),
        ),
        durations={"m2-0": 1200},
    )


class TestLoad:
    """Test tolerant loading."""

    def test_missing_file_gives_empty_snapshot(self, gate):
        assert gate.load() == Snapshot.empty()

    @pytest.mark.parametrize(
        "content",
        ["", "   ", "not json", "[1, 2, 3]", '"text"', "null", "{"],
    )
    def test_malformed_content_gives_empty_snapshot(self, gate, content):
        gate.path.write_text(content)
        snapshot = gate.load()
        assert snapshot.transcript == ()
        assert snapshot.durations == {}

    def test_stored_single_message(self, gate):
        gate.path.write_text(
            '{"messages":[{"id":"m1","role":"user","parts":[{"type":"text","text":"hi"}]}],"durations":{}}'
        )
        snapshot = gate.load()
        assert len(snapshot.transcript) == 1
        assert snapshot.transcript[0].id == "m1"
        assert snapshot.transcript[0].parts == (TextPart("hi"),)
        assert snapshot.transcript[0].finalized is True

    def test_absent_fields_default_to_empty(self, gate):
        gate.path.write_text('{"somethingNew": true}')
        assert gate.load() == Snapshot.empty()

    def test_wrongly_typed_fields_default_to_empty(self, gate):
        gate.path.write_text('{"messages": {"a": 1}, "durations": [1, 2]}')
        assert gate.load() == Snapshot.empty()

    def test_bad_entries_dropped_good_ones_kept(self, gate):
        data = {
            "messages": [
                {"id": "m1", "role": "user", "parts": [{"type": "text", "text": "hi"}]},
                {"id": "m2", "role": "robot", "parts": []},
                {"id": "m1", "role": "user", "parts": []},
                {"id": "m3", "role": "assistant", "parts": [{"type": "video"}]},
                {"id": "m4", "role": "assistant", "parts": [], "extra": "ignored"},
            ],
            "durations": {"m1-0": 100, "m4-0": -5, "m4-1": "slow", "m4-2": True},
        }
        gate.path.write_text(json.dumps(data))

        snapshot = gate.load()
        assert [m.id for m in snapshot.transcript] == ["m1", "m3", "m4"]
        assert snapshot.transcript[1].parts == (UnknownPart(raw={"type": "video"}),)
        assert snapshot.durations == {"m1-0": 100}

    def test_unknown_part_types_keep_message_and_indexes(self, gate):
        data = {
            "messages": [
                {"id": "m1", "role": "user", "parts": [{"type": "text", "text": "hi"}]},
                {
                    "id": "m2",
                    "role": "assistant",
                    "parts": [
                        {"type": "step-start"},
                        {"type": "reasoning", "text": "hmm"},
                        {"type": "text", "text": "Hello"},
                    ],
                },
            ],
            "durations": {"m2-1": 1200},
        }
        gate.path.write_text(json.dumps(data))

        snapshot = gate.load()

        assert [m.id for m in snapshot.transcript] == ["m1", "m2"]
        reply = snapshot.transcript[1]
        assert reply.parts[1] == ReasoningPart("hmm")
        assert reply.text == "Hello"
        assert snapshot.durations == {"m2-1": 1200}

        # Saving again writes the unrecognized part back untouched
        gate.save(snapshot)
        assert json.loads(gate.path.read_text()) == data


class TestSave:
    """Test best-effort saving."""

    def test_round_trip(self, gate):
        snapshot = sample_snapshot()
        assert gate.save(snapshot) is True
        assert gate.load() == snapshot

    def test_round_trip_with_in_flight_message(self, gate):
        snapshot = sample_snapshot(in_flight=True)
        gate.save(snapshot)
        loaded = gate.load()
        assert loaded == snapshot
        assert loaded.transcript[-1].finalized is True

    def test_writes_messages_and_durations_together(self, gate):
        gate.save(sample_snapshot())
        data = json.loads(gate.path.read_text())
        assert set(data) == {"messages", "durations"}
        assert data["durations"] == {"m2-0": 1200}
        assert data["messages"][0]["parts"] == [{"type": "text", "text": "Hi!"}]

    def test_creates_parent_directory(self, tmp_path):
        gate = PersistenceGate(tmp_path / "nested" / "slot.json")
        assert gate.save(sample_snapshot()) is True
        assert gate.path.exists()

    def test_write_failure_is_swallowed(self, gate):
        gate.save(sample_snapshot())
        with patch("chatwall.session.persistence.os.replace", side_effect=OSError("disk full")):
            assert gate.save(Snapshot.empty()) is False

        # Previous content survives and no temp files are left behind
        assert gate.load() == sample_snapshot()
        assert [p.name for p in gate.path.parent.iterdir()] == [gate.path.name]

    def test_non_json_tool_output_is_saved_as_text(self, gate):
        marker = object()
        snapshot = Snapshot(
            transcript=(
                Message(
                    id="m1",
                    role=Role.ASSISTANT,
                    parts=(ToolResultPart(output={"obj": marker}),),
                ),
            )
        )
        assert gate.save(snapshot) is True

        later = Snapshot(
            transcript=snapshot.transcript
            + (Message(id="m2", role=Role.USER, parts=(TextPart("next"),)),)
        )
        assert gate.save(later) is True

        loaded = gate.load()
        assert [m.id for m in loaded.transcript] == ["m1", "m2"]
        assert loaded.transcript[0].parts[0].output == {"obj": str(marker)}

    def test_unencodable_snapshot_is_not_written(self, gate):
        loop = []
        loop.append(loop)
        snapshot = Snapshot(
            transcript=(
                Message(
                    id="m1",
                    role=Role.ASSISTANT,
                    parts=(ToolResultPart(output=loop),),
                ),
            )
        )
        assert gate.save(snapshot) is False
        assert not gate.path.exists()

    def test_clear_overwrites_slot(self, gate):
        gate.save(sample_snapshot())
        assert gate.clear() is True
        assert json.loads(gate.path.read_text()) == {"messages": [], "durations": {}}
        assert gate.load() == Snapshot.empty()


def test_for_key_uses_sessions_dir(tmp_path, monkeypatch):
    from chatwall.core.config_paths import ConfigPaths

    monkeypatch.setattr(ConfigPaths, "BASE_DIR", tmp_path)
    gate = PersistenceGate.for_key("chat-messages")
    assert gate.path == tmp_path / "sessions" / "chat-messages.json"
