"""Tests for the raw transcript codec."""

from transcript_guard.codec import dump_transcript, parse_transcript
from transcript_guard.messages import (
    AssistantMessage,
    OtherBlock,
    SystemMessage,
    TextBlock,
    ToolCallBlock,
    ToolResultMessage,
    UserMessage,
)
from transcript_guard.pipeline import prepare_transcript


class TestParseTranscript:
    def test_parses_every_role(self):
        raw = [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "hi", "timestamp": 1},
            {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": "sure"},
                    {"type": "toolCall", "id": "c1", "name": "ls", "arguments": {"p": "."}},
                ],
                "stopReason": "toolUse",
                "model": "m1",
            },
            {
                "role": "toolResult",
                "toolCallId": "c1",
                "toolName": "ls",
                "content": [{"type": "text", "text": "a.txt"}],
                "isError": False,
                "timestamp": 5,
                "details": {"exit": 0},
            },
        ]

        messages = parse_transcript(raw)

        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], UserMessage)
        assert messages[1].extra == {"timestamp": 1}

        assistant = messages[2]
        assert isinstance(assistant, AssistantMessage)
        assert assistant.stop_reason == "toolUse"
        assert assistant.extra == {"model": "m1"}
        assert assistant.content == [
            TextBlock(text="sure"),
            ToolCallBlock(type="toolCall", id="c1", name="ls", arguments={"p": "."}),
        ]

        result = messages[3]
        assert isinstance(result, ToolResultMessage)
        assert result.reference_id == "c1"
        assert result.timestamp == 5
        assert result.extra == {"details": {"exit": 0}}

    def test_keeps_malformed_tool_calls(self):
        """Malformed blocks survive parsing so validation can count them."""
        raw = [{"role": "assistant", "content": [{"type": "toolUse", "name": "ls"}]}]

        block = parse_transcript(raw)[0].content[0]

        assert isinstance(block, ToolCallBlock)
        assert block.id is None
        assert block.is_well_formed is False

    def test_unknown_blocks_become_other_blocks(self):
        raw = [
            {
                "role": "assistant",
                "content": [{"type": "thinking", "thinking": "hmm", "signature": "s"}],
            }
        ]

        block = parse_transcript(raw)[0].content[0]

        assert block == OtherBlock(type="thinking", data={"thinking": "hmm", "signature": "s"})

    def test_skips_unknown_roles_and_junk(self, caplog):
        raw = [{"role": "tool"}, "junk", None, {"role": "user", "content": "ok"}]

        messages = parse_transcript(raw)

        assert messages == [UserMessage(content="ok")]
        assert "unknown role" in caplog.text

    def test_legacy_tool_use_id(self):
        raw = [{"role": "toolResult", "toolUseId": "u1", "content": []}]

        result = parse_transcript(raw)[0]

        assert result.tool_call_id is None
        assert result.reference_id == "u1"


class TestDumpTranscript:
    def test_round_trips_stored_entries(self):
        raw = [
            {"role": "user", "content": "hi"},
            {
                "role": "assistant",
                "content": [
                    {"type": "functionCall", "id": "f1", "name": "calc", "input": {"x": 1}, "thoughtSignature": "abc"},
                ],
                "stopReason": "toolUse",
            },
            {
                "role": "toolResult",
                "toolCallId": "f1",
                "toolName": "calc",
                "content": [{"type": "text", "text": "2"}],
                "isError": False,
                "timestamp": 10,
            },
        ]

        assert dump_transcript(parse_transcript(raw)) == raw

    def test_dumps_synthetic_results(self, clock, now):
        raw = [{"role": "assistant", "content": [{"type": "toolCall", "id": "c1", "name": "ls", "arguments": {}}]}]

        report = prepare_transcript(parse_transcript(raw), "anthropic", None, clock=clock)
        dumped = dump_transcript(report.messages)

        assert dumped[1]["role"] == "toolResult"
        assert dumped[1]["toolCallId"] == "c1"
        assert dumped[1]["toolName"] == "ls"
        assert dumped[1]["isError"] is True
        assert dumped[1]["timestamp"] == now
        assert dumped[1]["content"][0]["type"] == "text"

    def test_round_trips_untyped_blocks(self):
        """A block without a usable type is dumped back without inventing one."""
        raw = [
            {
                "role": "assistant",
                "content": [{"text": "no type"}, {"type": 3, "data": "x"}],
            }
        ]

        messages = parse_transcript(raw)

        assert messages[0].content[0] == OtherBlock(type=None, data={"text": "no type"})
        assert dump_transcript(messages) == raw

    def test_round_trips_unusable_tool_result_fields(self):
        """Fields with unexpected types are not interpreted but survive a round trip."""
        raw = [
            {
                "role": "toolResult",
                "toolCallId": 7,
                "toolUseId": "u7",
                "toolName": ["ls"],
                "content": [],
                "isError": False,
                "timestamp": 1.5,
            }
        ]

        result = parse_transcript(raw)[0]

        assert result.tool_call_id is None
        assert result.reference_id == "u7"
        assert result.tool_name is None
        assert result.timestamp is None
        assert result.extra == {"toolCallId": 7, "toolName": ["ls"], "timestamp": 1.5}
        assert dump_transcript([result]) == raw

    def test_round_trips_non_string_stop_reason(self):
        raw = [{"role": "assistant", "content": [], "stopReason": {"code": 1}}]

        message = parse_transcript(raw)[0]

        assert message.stop_reason is None
        assert dump_transcript([message]) == raw
