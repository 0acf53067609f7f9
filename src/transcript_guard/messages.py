"""
Message model shared by every repair stage.

A transcript is a plain ``list[Message]``. The flow is:

    Raw Transcript → Message Model → Repaired Transcript
    (list[dict])     (list[Message])  (list[Message])

Only assistant messages and tool results carry tool-call linkage; user and
system messages are opaque to the repair stages and pass through untouched.

Tool-call blocks are allowed to be malformed (missing id, name or arguments)
so that a broken transcript survives parsing and can be repaired instead of
rejected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ToolCallType = Literal["toolCall", "toolUse", "functionCall"]
TOOL_CALL_TYPES: frozenset[str] = frozenset({"toolCall", "toolUse", "functionCall"})

# stop_reason values that freeze an assistant turn as-is
TERMINAL_STOP_REASONS: frozenset[str] = frozenset({"error", "aborted"})


@dataclass
class TextBlock:
    """Prose content."""

    type: Literal["text"] = field(default="text", init=False)
    text: str = ""
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolCallBlock:
    """
    A tool invocation emitted by the model.

    ``id`` and ``name`` are typed loosely on purpose: a corrupted transcript
    may carry ``None`` or a non-string there, and the input validator needs
    to see it to drop it.
    """

    type: ToolCallType
    id: Any = None
    name: Any = None
    input: Any = None
    arguments: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_well_formed(self) -> bool:
        """True when id and name are non-blank strings and some input is present."""
        has_input = self.input is not None or self.arguments is not None
        return has_input and _is_non_blank(self.id) and _is_non_blank(self.name)


@dataclass
class OtherBlock:
    """Any block type the engine does not interpret (images, thinking, ...)."""

    type: str | None
    data: dict[str, Any] = field(default_factory=dict)


ContentBlock = TextBlock | ToolCallBlock | OtherBlock


@dataclass
class UserMessage:
    role: Literal["user"] = field(default="user", init=False)
    content: Any = ""
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class SystemMessage:
    role: Literal["system"] = field(default="system", init=False)
    content: Any = ""
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class AssistantMessage:
    """
    A model turn.

    ``content`` is normally a list of blocks; some providers store a bare
    string, which carries no tool calls.
    """

    role: Literal["assistant"] = field(default="assistant", init=False)
    content: list[ContentBlock] | str = field(default_factory=list)
    stop_reason: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        """True for errored/aborted turns, whose tool calls are left alone."""
        return self.stop_reason in TERMINAL_STOP_REASONS


@dataclass
class ToolResultMessage:
    """
    Outcome of a tool call.

    ``tool_use_id`` is the legacy alias of ``tool_call_id`` and is only
    consulted when ``tool_call_id`` is absent.
    """

    role: Literal["toolResult"] = field(default="toolResult", init=False)
    tool_call_id: str | None = None
    tool_use_id: str | None = None
    tool_name: str | None = None
    content: Any = field(default_factory=list)
    is_error: bool = False
    timestamp: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def reference_id(self) -> str | None:
        if _is_non_empty(self.tool_call_id):
            return self.tool_call_id
        if _is_non_empty(self.tool_use_id):
            return self.tool_use_id
        return None


# Closed union of transcript messages
Message = UserMessage | SystemMessage | AssistantMessage | ToolResultMessage


def _is_non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_non_empty(value: Any) -> bool:
    return isinstance(value, str) and bool(value)
