"""Message builders for unit tests.

Keep test transcripts short and readable:

    transcript = [
        user("list files"),
        assistant(tool_call("c1", "ls")),
        tool_result("c1", "a.txt"),
    ]
"""

from typing import Any

from transcript_guard.messages import (
    AssistantMessage,
    ContentBlock,
    SystemMessage,
    TextBlock,
    ToolCallBlock,
    ToolResultMessage,
    UserMessage,
)

FIXED_NOW = 1_700_000_000_000


def fixed_clock() -> int:
    return FIXED_NOW


def user(text: str = "hello") -> UserMessage:
    return UserMessage(content=text)


def system(text: str = "note") -> SystemMessage:
    return SystemMessage(content=text)


def text(value: str = "thinking out loud") -> TextBlock:
    return TextBlock(text=value)


def tool_call(
    id: Any = "call1",
    name: Any = "read_file",
    arguments: Any = None,
    type: str = "toolCall",
    **kwargs: Any,
) -> ToolCallBlock:
    """Well-formed by default; pass arguments=None plus input=None to break it."""
    if arguments is None and "input" not in kwargs:
        arguments = {"path": "README.md"}
    return ToolCallBlock(type=type, id=id, name=name, arguments=arguments, **kwargs)


def assistant(*blocks: ContentBlock, stop_reason: str | None = None) -> AssistantMessage:
    return AssistantMessage(content=list(blocks), stop_reason=stop_reason)


def tool_result(
    id: str | None = "call1",
    output: str = "ok",
    legacy: bool = False,
    name: str = "read_file",
) -> ToolResultMessage:
    """Result referencing ``id`` via toolCallId, or via toolUseId when legacy."""
    if legacy:
        return ToolResultMessage(
            tool_use_id=id, tool_name=name, content=[TextBlock(text=output)]
        )
    return ToolResultMessage(
        tool_call_id=id, tool_name=name, content=[TextBlock(text=output)]
    )


def all_call_ids(messages: list) -> list[str]:
    """Every tool-call block id, with repeats."""
    ids = []
    for msg in messages:
        if isinstance(msg, AssistantMessage) and isinstance(msg.content, list):
            ids.extend(b.id for b in msg.content if isinstance(b, ToolCallBlock))
    return ids
