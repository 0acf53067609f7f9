"""
Raw transcript codec - converts stored session dicts to the message model.

Stored transcripts use camelCase keys:

    {"role": "assistant", "content": [...], "stopReason": "toolUse"}
    {"role": "toolResult", "toolCallId": "...", "toolName": "...",
     "content": [...], "isError": false, "timestamp": 1700000000000}

Parsing is lenient: malformed tool-call blocks are kept (the input validator
counts and drops them), unknown keys survive in ``extra``, and items that are
not messages at all are skipped with a warning.
"""

from __future__ import annotations

import logging
from typing import Any, assert_never

from .messages import (
    TOOL_CALL_TYPES,
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

logger = logging.getLogger(__name__)


def parse_transcript(raw: list[Any]) -> list[Message]:
    """
    Parse stored transcript dicts into messages.

    Example:
        >>> raw = [
        ...     {"role": "user", "content": "Hi"},
        ...     {"role": "assistant", "content": [{"type": "toolCall", "id": "c1", "name": "ls", "arguments": {}}]},
        ...     {"role": "toolResult", "toolCallId": "c1", "content": [], "isError": False},
        ... ]
        >>> [m.role for m in parse_transcript(raw)]
        ['user', 'assistant', 'toolResult']
    """
    messages: list[Message] = []

    for item in raw:
        if not isinstance(item, dict):
            logger.warning(f"Skipping non-message transcript entry: {type(item).__name__}")
            continue

        role = item.get("role")
        extra = {k: v for k, v in item.items() if k not in ("role", "content")}

        if role == "user":
            messages.append(UserMessage(content=item.get("content", ""), extra=extra))
        elif role == "system":
            messages.append(SystemMessage(content=item.get("content", ""), extra=extra))
        elif role == "assistant":
            messages.append(_parse_assistant(item))
        elif role == "toolResult":
            messages.append(_parse_tool_result(item))
        else:
            logger.warning(f"Skipping transcript entry with unknown role: {role!r}")

    return messages


def dump_transcript(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert messages back to stored transcript dicts."""
    return [dump_message(msg) for msg in messages]


def dump_message(msg: Message) -> dict[str, Any]:
    if isinstance(msg, (UserMessage, SystemMessage)):
        return {"role": msg.role, "content": _dump_content(msg.content), **msg.extra}

    if isinstance(msg, AssistantMessage):
        data: dict[str, Any] = {"role": "assistant", "content": _dump_content(msg.content)}
        if msg.stop_reason is not None:
            data["stopReason"] = msg.stop_reason
        data.update(msg.extra)
        return data

    if isinstance(msg, ToolResultMessage):
        data = {"role": "toolResult"}
        if msg.tool_call_id is not None:
            data["toolCallId"] = msg.tool_call_id
        if msg.tool_use_id is not None:
            data["toolUseId"] = msg.tool_use_id
        if msg.tool_name is not None:
            data["toolName"] = msg.tool_name
        data["content"] = _dump_content(msg.content)
        data["isError"] = msg.is_error
        if msg.timestamp is not None:
            data["timestamp"] = msg.timestamp
        data.update(msg.extra)
        return data

    assert_never(msg)


def parse_block(raw: Any) -> ContentBlock | None:
    """Parse one content block; None for entries that are not blocks."""
    if not isinstance(raw, dict):
        return None

    block_type = raw.get("type")
    if block_type in TOOL_CALL_TYPES:
        return ToolCallBlock(
            type=block_type,
            id=raw.get("id"),
            name=raw.get("name"),
            input=raw.get("input"),
            arguments=raw.get("arguments"),
            extra={
                k: v
                for k, v in raw.items()
                if k not in ("type", "id", "name", "input", "arguments")
            },
        )
    if block_type == "text" and isinstance(raw.get("text"), str):
        return TextBlock(
            text=raw["text"],
            extra={k: v for k, v in raw.items() if k not in ("type", "text")},
        )
    if not isinstance(block_type, str):
        # a missing or non-string type stays in data exactly as stored
        return OtherBlock(type=None, data=dict(raw))
    return OtherBlock(
        type=block_type, data={k: v for k, v in raw.items() if k != "type"}
    )


def dump_block(block: ContentBlock) -> dict[str, Any]:
    if isinstance(block, TextBlock):
        return {"type": "text", "text": block.text, **block.extra}

    if isinstance(block, ToolCallBlock):
        data: dict[str, Any] = {"type": block.type}
        for key in ("id", "name", "input", "arguments"):
            value = getattr(block, key)
            if value is not None:
                data[key] = value
        data.update(block.extra)
        return data

    if isinstance(block, OtherBlock):
        if block.type is None:
            return dict(block.data)
        return {"type": block.type, **block.data}

    assert_never(block)


def _parse_assistant(item: dict[str, Any]) -> AssistantMessage:
    raw_content = item.get("content")
    content: list[ContentBlock] | str
    if isinstance(raw_content, str):
        content = raw_content
    elif isinstance(raw_content, list):
        content = []
        for raw_block in raw_content:
            block = parse_block(raw_block)
            if block is None:
                logger.warning(f"Skipping non-block assistant content: {raw_block!r}")
                continue
            content.append(block)
    else:
        content = []

    stop_reason = item.get("stopReason")
    if isinstance(stop_reason, str):
        extra = {k: v for k, v in item.items() if k not in ("role", "content", "stopReason")}
    else:
        # an unusable stopReason is not interpreted but still dumped back as stored
        stop_reason = None
        extra = {k: v for k, v in item.items() if k not in ("role", "content")}
    return AssistantMessage(content=content, stop_reason=stop_reason, extra=extra)


def _parse_tool_result(item: dict[str, Any]) -> ToolResultMessage:
    fields = {
        "toolCallId": _typed(item, "toolCallId", str),
        "toolUseId": _typed(item, "toolUseId", str),
        "toolName": _typed(item, "toolName", str),
        "isError": _typed(item, "isError", bool),
        "timestamp": _typed(item, "timestamp", int),
    }
    # keys whose value did not fit the typed field are kept verbatim in extra
    consumed = {"role", "content"} | {k for k, v in fields.items() if v is not None}

    return ToolResultMessage(
        tool_call_id=fields["toolCallId"],
        tool_use_id=fields["toolUseId"],
        tool_name=fields["toolName"],
        content=item.get("content", []),
        is_error=bool(item.get("isError", False)),
        timestamp=fields["timestamp"],
        extra={k: v for k, v in item.items() if k not in consumed},
    )


def _typed(item: dict[str, Any], key: str, kind: type) -> Any:
    value = item.get(key)
    if kind is int and isinstance(value, bool):
        return None
    return value if isinstance(value, kind) else None


def _dump_content(content: Any) -> Any:
    if not isinstance(content, list):
        return content
    return [
        dump_block(block)
        if isinstance(block, (TextBlock, ToolCallBlock, OtherBlock))
        else block
        for block in content
    ]
