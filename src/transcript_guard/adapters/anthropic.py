"""
Anthropic adapter - converts between the message model and Anthropic MessageParam.

Handles:
- AssistantMessage → assistant message with text/tool_use blocks
- ToolResultMessage → user message with a tool_result block
- Batching consecutive same-role messages (Anthropic requires alternating roles)
- The reverse direction, splitting tool_result blocks out of user messages
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any, assert_never

from anthropic.types import (
    MessageParam,
    TextBlockParam,
    ToolResultBlockParam,
    ToolUseBlockParam,
)

from ..codec import dump_block, parse_block
from ..messages import (
    AssistantMessage,
    Message,
    OtherBlock,
    SystemMessage,
    TextBlock,
    ToolCallBlock,
    ToolResultMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)

# Type aliases
ContentBlockParam = TextBlockParam | ToolUseBlockParam | ToolResultBlockParam


def to_anthropic_messages(messages: list[Message]) -> list[MessageParam]:
    """
    Convert a (repaired) transcript to Anthropic MessageParam format.

    Run the pipeline first: Anthropic rejects tool_use blocks without a
    matching tool_result, which is exactly what pairing repair guarantees.

    Example:
        >>> report = prepare_transcript(messages, "anthropic", "claude-sonnet-4-5")
        >>> params = to_anthropic_messages(report.messages)
        >>> # Ready for client.messages.create(messages=params)
    """
    params: list[MessageParam] = []

    for msg in messages:
        if isinstance(msg, UserMessage):
            params.append({"role": "user", "content": _user_content(msg.content)})

        elif isinstance(msg, AssistantMessage):
            content = _assistant_content(msg)
            if content:
                params.append({"role": "assistant", "content": content})
            else:
                logger.debug("Skipping assistant message with no Anthropic content")

        elif isinstance(msg, ToolResultMessage):
            tool_result_block: ToolResultBlockParam = {
                "type": "tool_result",
                "tool_use_id": msg.reference_id or "",
                "content": _text_blocks(msg.content),
                "is_error": msg.is_error,
            }
            params.append({"role": "user", "content": [tool_result_block]})

        elif isinstance(msg, SystemMessage):
            # Anthropic uses separate system param
            continue

        else:
            assert_never(msg)

    return _batch_consecutive_messages(params)


def from_anthropic_messages(params: Iterable[MessageParam]) -> list[Message]:
    """
    Convert Anthropic MessageParam history to the message model.

    ``tool_result`` blocks inside a user message become separate
    ToolResultMessages, emitted before any remaining user content.
    """
    messages: list[Message] = []

    for param in params:
        role = param["role"]
        content = param["content"]

        if role == "assistant":
            if isinstance(content, str):
                messages.append(AssistantMessage(content=[TextBlock(text=content)]))
                continue
            blocks = [_from_anthropic_block(_as_dict(block)) for block in content]
            messages.append(AssistantMessage(content=blocks))
            continue

        if isinstance(content, str):
            messages.append(UserMessage(content=content))
            continue

        remainder: list[dict[str, Any]] = []
        for block in content:
            data = _as_dict(block)
            if data.get("type") == "tool_result":
                messages.append(_tool_result_from_block(data))
            else:
                remainder.append(data)
        if remainder:
            messages.append(UserMessage(content=remainder))

    return messages


def _assistant_content(msg: AssistantMessage) -> list[ContentBlockParam] | str:
    if isinstance(msg.content, str):
        return msg.content

    blocks: list[ContentBlockParam] = []
    for block in msg.content:
        if isinstance(block, TextBlock):
            if block.text:
                blocks.append({"type": "text", "text": block.text})
        elif isinstance(block, ToolCallBlock):
            tool_use_block: ToolUseBlockParam = {
                "type": "tool_use",
                "id": block.id,
                "name": block.name,
                "input": _tool_input(block),
            }
            blocks.append(tool_use_block)
        elif isinstance(block, OtherBlock):
            logger.debug(f"Skipping {block.type} block for Anthropic request")
        else:
            assert_never(block)
    return blocks


def _tool_input(block: ToolCallBlock) -> dict[str, Any]:
    """Tool input as a dict; JSON-encoded arguments (functionCall style) are decoded."""
    for value in (block.input, block.arguments):
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError:
                logger.warning(
                    f"Failed to parse tool call arguments: id={block.id}, raw={value[:100]}"
                )
                continue
        if isinstance(value, dict):
            return value
    return {}


def _user_content(content: Any) -> Any:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return [
            dump_block(block) if isinstance(block, (TextBlock, OtherBlock)) else block
            for block in content
        ]
    return str(content)


def _text_blocks(content: Any) -> str | list[TextBlockParam]:
    """Reduce opaque tool result content to what tool_result accepts."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return str(content) if content is not None else ""

    blocks: list[TextBlockParam] = []
    for item in content:
        if isinstance(item, TextBlock):
            blocks.append({"type": "text", "text": item.text})
        elif isinstance(item, dict) and item.get("type") == "text":
            blocks.append({"type": "text", "text": str(item.get("text", ""))})
    return blocks


def _from_anthropic_block(data: dict[str, Any]) -> TextBlock | ToolCallBlock | OtherBlock:
    if data.get("type") == "tool_use":
        return ToolCallBlock(
            type="toolUse",
            id=data.get("id"),
            name=data.get("name"),
            input=data.get("input"),
        )
    return parse_block(data) or OtherBlock(type=None, data=dict(data))


def _tool_result_from_block(data: dict[str, Any]) -> ToolResultMessage:
    raw = data.get("content", "")
    if isinstance(raw, str):
        content: list[Any] = [TextBlock(text=raw)] if raw else []
    else:
        content = [parse_block(item) or item for item in raw]
    return ToolResultMessage(
        tool_call_id=data.get("tool_use_id"),
        content=content,
        is_error=bool(data.get("is_error", False)),
    )


def _as_dict(block: Any) -> dict[str, Any]:
    # Response ContentBlocks are pydantic models, params are TypedDicts
    if hasattr(block, "model_dump"):
        return block.model_dump()
    return dict(block)


def _batch_consecutive_messages(
    messages: list[MessageParam],
) -> list[MessageParam]:
    """
    Batch consecutive same-role messages into single messages.

    Anthropic requires alternating user/assistant roles. This merges
    consecutive messages with the same role into a single message
    with multiple content blocks.
    """
    batched: list[MessageParam] = []

    for msg in messages:
        if batched and batched[-1]["role"] == msg["role"]:
            previous = batched[-1]
            # Always a new list, so merging never extends a caller's content
            previous["content"] = _as_blocks(previous["content"]) + _as_blocks(
                msg["content"]
            )
        else:
            batched.append({"role": msg["role"], "content": msg["content"]})

    return batched


def _as_blocks(content: Any) -> list[Any]:
    if isinstance(content, str):
        text_block: TextBlockParam = {"type": "text", "text": content}
        return [text_block]
    return list(content)
