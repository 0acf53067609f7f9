"""
transcript-guard - Keep agent transcripts valid for chat-completion APIs.

A model turn may issue several tool calls, and the next request must carry
exactly one result per call. Crashes, cancelled turns, hand edits and
provider switches break that; this package repairs it.

Message Model:
    Message: UserMessage | SystemMessage | AssistantMessage | ToolResultMessage
    ToolCallBlock, TextBlock, OtherBlock: assistant content blocks

Repair Stages:
    repair_inputs: Drop malformed tool-call blocks
    canonicalize_ids: Rewrite tool-call ids to a unique, provider-legal form
    repair_pairing: One result per call, in call order, no orphans

Policy & Pipeline:
    resolve_transcript_policy: Which stages a provider/model needs
    normalize_transcript: Run the stages for a resolved policy
    prepare_transcript: Resolve + normalize in one call

Example:
    from transcript_guard import parse_transcript, prepare_transcript

    messages = parse_transcript(raw_session_entries)
    report = prepare_transcript(messages, provider="anthropic", model_id="claude-sonnet-4-5")
    if report.changed:
        logger.info(report.summary())
    send(report.messages)
"""

from .codec import dump_transcript, parse_transcript
from .messages import (
    AssistantMessage,
    ContentBlock,
    Message,
    OtherBlock,
    SystemMessage,
    TextBlock,
    ToolCallBlock,
    ToolResultMessage,
    UserMessage,
)
from .pipeline import TranscriptRepairReport, normalize_transcript, prepare_transcript
from .policy import TranscriptPolicy, resolve_transcript_policy
from .repair import (
    ToolCallInputRepairReport,
    ToolUseRepairReport,
    canonicalize_ids,
    make_missing_tool_result,
    make_unique_tool_call_id,
    repair_inputs,
    repair_pairing,
    sanitize_tool_call_id,
)

__all__ = [
    # Messages
    "Message",
    "UserMessage",
    "SystemMessage",
    "AssistantMessage",
    "ToolResultMessage",
    "ContentBlock",
    "TextBlock",
    "ToolCallBlock",
    "OtherBlock",
    # Codec
    "parse_transcript",
    "dump_transcript",
    # Repair
    "repair_inputs",
    "ToolCallInputRepairReport",
    "sanitize_tool_call_id",
    "make_unique_tool_call_id",
    "canonicalize_ids",
    "repair_pairing",
    "make_missing_tool_result",
    "ToolUseRepairReport",
    # Policy & Pipeline
    "TranscriptPolicy",
    "resolve_transcript_policy",
    "normalize_transcript",
    "prepare_transcript",
    "TranscriptRepairReport",
]

__version__ = "0.0.1"
