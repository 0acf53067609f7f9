"""Tool-call input validation. Pure, sync, unit-testable."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import assert_never

from ..messages import (
    AssistantMessage,
    ContentBlock,
    Message,
    SystemMessage,
    ToolCallBlock,
    ToolResultMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)


@dataclass
class ToolCallInputRepairReport:
    messages: list[Message]
    dropped_tool_calls: int = 0
    dropped_assistant_messages: int = 0


def repair_inputs(messages: list[Message]) -> ToolCallInputRepairReport:
    """
    Drop structurally invalid tool-call blocks from assistant messages.

    A tool-call block is kept only when it has a non-blank id, a non-blank
    name and some input (``input`` or ``arguments``). An assistant message
    left with no content after dropping is removed entirely.

    Returns:
        Report whose ``messages`` is the very same list object when nothing
        was dropped.
    """
    dropped_tool_calls = 0
    dropped_assistant_messages = 0
    changed = False
    out: list[Message] = []

    for msg in messages:
        if isinstance(msg, AssistantMessage):
            if isinstance(msg.content, str):
                out.append(msg)
                continue

            kept: list[ContentBlock] = [
                block
                for block in msg.content
                if not isinstance(block, ToolCallBlock) or block.is_well_formed
            ]
            dropped = len(msg.content) - len(kept)
            if not dropped:
                out.append(msg)
                continue

            changed = True
            dropped_tool_calls += dropped
            logger.debug(f"Dropped {dropped} malformed tool call(s) from assistant message")
            if not kept:
                dropped_assistant_messages += 1
                continue
            out.append(replace(msg, content=kept))

        elif isinstance(msg, (UserMessage, SystemMessage, ToolResultMessage)):
            out.append(msg)
        else:
            assert_never(msg)

    return ToolCallInputRepairReport(
        messages=out if changed else messages,
        dropped_tool_calls=dropped_tool_calls,
        dropped_assistant_messages=dropped_assistant_messages,
    )
