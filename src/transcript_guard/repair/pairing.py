"""
Tool-call/result pairing repair.

Anthropic- and Google-family APIs reject a request in which a tool call is
not followed by exactly one result. A transcript that survived a crash in the
middle of a tool call, or one that was edited by hand, usually violates that.

For every assistant message with tool calls (the span anchor), the messages
up to the next assistant message form its span. Within the span:

- Results for the anchor's calls are kept, first occurrence per id wins
- Results for anything else are orphans and dropped
- Other messages are kept as the remainder, in original order
- Missing results are synthesized as error results (when allowed)

The span is emitted as: anchor, results in call order, remainder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import assert_never

from ..clock import Clock, system_clock
from ..messages import (
    AssistantMessage,
    Message,
    SystemMessage,
    TextBlock,
    ToolResultMessage,
    UserMessage,
)
from .tool_call_id import extract_tool_calls

logger = logging.getLogger(__name__)

SYNTHETIC_RESULT_TEXT = (
    "[transcript-guard] missing tool result in session history; "
    "inserted synthetic error result for transcript repair."
)


@dataclass
class ToolUseRepairReport:
    messages: list[Message]
    added: list[ToolResultMessage] = field(default_factory=list)
    dropped_duplicate_count: int = 0
    dropped_orphan_count: int = 0
    moved: bool = False


def make_missing_tool_result(
    tool_call_id: str,
    tool_name: str | None = None,
    clock: Clock = system_clock,
) -> ToolResultMessage:
    """Build the marked error result that stands in for a lost one."""
    return ToolResultMessage(
        tool_call_id=tool_call_id,
        tool_name=tool_name or "unknown",
        content=[TextBlock(text=SYNTHETIC_RESULT_TEXT)],
        is_error=True,
        timestamp=clock(),
    )


def repair_pairing(
    messages: list[Message],
    allow_synthetic: bool = True,
    clock: Clock = system_clock,
) -> ToolUseRepairReport:
    """
    Give every tool call exactly one result placed right after its message.

    Assistant messages that stopped with ``error`` or ``aborted`` are copied
    through without scanning; their calls get no synthetic results.

    Args:
        messages: Transcript to repair
        allow_synthetic: Insert error results for calls with no result
        clock: Time source for synthesized result timestamps

    Returns:
        Report whose ``messages`` is the very same list object when the
        output sequence equals the input sequence.
    """
    out: list[Message] = []
    added: list[ToolResultMessage] = []
    # result ids already emitted anywhere in the output
    emitted_ids: set[str] = set()
    dropped_duplicate_count = 0
    dropped_orphan_count = 0
    moved = False

    i = 0
    while i < len(messages):
        msg = messages[i]
        i += 1

        if isinstance(msg, ToolResultMessage):
            logger.warning(
                f"Dropping tool result outside any tool call span: id={msg.reference_id}"
            )
            dropped_orphan_count += 1
            continue
        if isinstance(msg, (UserMessage, SystemMessage)):
            out.append(msg)
            continue
        if not isinstance(msg, AssistantMessage):
            assert_never(msg)

        calls = [] if msg.is_terminal else extract_tool_calls(msg)
        out.append(msg)
        if not calls:
            continue

        call_ids = {call.id for call in calls}
        results: dict[str, ToolResultMessage] = {}
        remainder: list[Message] = []

        while i < len(messages) and not isinstance(messages[i], AssistantMessage):
            nxt = messages[i]
            i += 1

            if not isinstance(nxt, ToolResultMessage):
                remainder.append(nxt)
                continue

            result_id = nxt.reference_id
            if result_id is None or result_id not in call_ids:
                logger.warning(
                    f"Dropping tool result with no matching call in span: id={result_id}"
                )
                dropped_orphan_count += 1
            elif result_id in results or result_id in emitted_ids:
                logger.debug(f"Dropping duplicate tool result: id={result_id}")
                dropped_duplicate_count += 1
            else:
                results[result_id] = nxt

        emitted = 0
        for call in calls:
            if call.id in emitted_ids:
                continue
            result = results.get(call.id)
            if result is None:
                if not allow_synthetic:
                    continue
                result = make_missing_tool_result(call.id, call.name, clock)
                added.append(result)
                logger.warning(
                    f"Inserted synthetic error result for tool call: "
                    f"id={call.id}, name={result.tool_name}"
                )
            emitted_ids.add(call.id)
            out.append(result)
            emitted += 1

        if emitted and remainder:
            moved = True
        out.extend(remainder)

    unchanged = len(out) == len(messages) and all(
        a is b for a, b in zip(out, messages)
    )
    return ToolUseRepairReport(
        messages=messages if unchanged else out,
        added=added,
        dropped_duplicate_count=dropped_duplicate_count,
        dropped_orphan_count=dropped_orphan_count,
        moved=moved,
    )
