"""Tests for transcript data models."""

import pytest

from chatwall.session.models import (
    Message,
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
    make_part,
    part_from_dict,
)


class TestParts:
    """Test part wire conversion."""

    def test_text_part_round_trip(self):
        part = TextPart(content="hi")
        assert part.to_dict() == {"type": "text", "text": "hi"}
        assert part_from_dict(part.to_dict()) == part

    def test_reasoning_part_uses_text_field(self):
        part = part_from_dict({"type": "reasoning", "text": "hmm"})
        assert isinstance(part, ReasoningPart)
        assert part.content == "hmm"
        assert part.kind is PartKind.REASONING

    def test_tool_call_part(self):
        part = part_from_dict(
            {"type": "tool-call", "name": "search", "args": {"q": "dal"}}
        )
        assert part == ToolCallPart(name="search", args={"q": "dal"})
        assert part.to_dict() == {
            "type": "tool-call",
            "name": "search",
            "args": {"q": "dal"},
        }

    def test_tool_result_part_keeps_any_output(self):
        part = part_from_dict({"type": "tool-result", "output": [1, 2]})
        assert part == ToolResultPart(output=[1, 2])

    def test_unknown_type_kept_verbatim(self):
        raw = {"type": "step-start", "step": 1}
        part = part_from_dict(raw)
        assert part == UnknownPart(raw=raw)
        assert part.kind is PartKind.UNKNOWN
        assert part.to_dict() == raw

    def test_non_json_tool_payloads_are_stringified(self):
        marker = object()
        call = ToolCallPart(name="lookup", args={"when": marker})
        result = ToolResultPart(output={"count": 2, "obj": marker})

        assert call.to_dict()["args"] == {"when": str(marker)}
        assert result.to_dict()["output"] == {"count": 2, "obj": str(marker)}

    def test_non_string_text_rejected(self):
        with pytest.raises(ValueError):
            part_from_dict({"type": "text", "text": 5})

    def test_tool_call_without_name_rejected(self):
        with pytest.raises(ValueError):
            part_from_dict({"type": "tool-call", "args": {}})

    def test_make_part_only_for_streamable_kinds(self):
        assert make_part(PartKind.TEXT, "a") == TextPart(content="a")
        assert make_part(PartKind.REASONING) == ReasoningPart(content="")
        with pytest.raises(ValueError):
            make_part(PartKind.TOOL_CALL)


class TestMessage:
    """Test message conversion and equality."""

    def test_from_dict(self):
        message = Message.from_dict(
            {"id": "m1", "role": "user", "parts": [{"type": "text", "text": "hi"}]}
        )
        assert message.id == "m1"
        assert message.role is Role.USER
        assert message.parts == (TextPart(content="hi"),)
        assert message.finalized is True

    def test_from_dict_keeps_message_with_odd_parts(self):
        message = Message.from_dict(
            {
                "id": "m2",
                "role": "assistant",
                "parts": [
                    {"type": "step-start"},
                    {"type": "text", "text": 5},
                    "junk",
                    {"type": "text", "text": "Hello"},
                ],
            }
        )
        assert [p.kind for p in message.parts] == [
            PartKind.UNKNOWN,
            PartKind.UNKNOWN,
            PartKind.TEXT,
        ]
        assert message.parts[1] == UnknownPart(raw={"type": "text", "text": 5})
        assert message.text == "Hello"

    def test_finalized_flag_not_part_of_equality(self):
        open_message = Message(id="a", role=Role.ASSISTANT, finalized=False)
        closed_message = Message(id="a", role=Role.ASSISTANT, finalized=True)
        assert open_message == closed_message

    def test_to_dict_omits_finalized(self):
        data = Message(id="a", role=Role.ASSISTANT, finalized=False).to_dict()
        assert data == {"id": "a", "role": "assistant", "parts": []}

    def test_text_skips_reasoning(self):
        message = Message(
            id="a",
            role=Role.ASSISTANT,
            parts=(ReasoningPart("think"), TextPart("Hello "), TextPart("there")),
        )
        assert message.text == "Hello there"

    @pytest.mark.parametrize(
        "data",
        [
            {"role": "user", "parts": []},
            {"id": "", "role": "user", "parts": []},
            {"id": "m1", "role": "system", "parts": []},
            {"id": "m1", "role": "user", "parts": "nope"},
            "not a message",
        ],
    )
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(ValueError):
            Message.from_dict(data)


def test_duration_key_format():
    assert duration_key("m2", 0) == "m2-0"


def test_status_busy_states():
    assert Status.SUBMITTED.is_busy
    assert Status.STREAMING.is_busy
    assert not Status.IDLE.is_busy
    assert not Status.READY.is_busy
    assert not Status.ERROR.is_busy


def test_snapshot_to_dict_shape():
    snapshot = Snapshot(
        transcript=(Message(id="m1", role=Role.USER, parts=(TextPart("hi"),)),),
        durations={"m1-0": 5},
    )
    assert snapshot.to_dict() == {
        "messages": [
            {"id": "m1", "role": "user", "parts": [{"type": "text", "text": "hi"}]}
        ],
        "durations": {"m1-0": 5},
    }
