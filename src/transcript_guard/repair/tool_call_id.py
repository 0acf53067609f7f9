"""
Tool-call id canonicalization.

Providers disagree on what a legal tool-call id looks like: Anthropic and
Google accept alphanumeric ids of any reasonable length, Mistral only accepts
exactly nine alphanumeric characters. Switching providers mid-conversation
therefore means rewriting every id in the transcript, and the rewrite has to
keep each call linked to its result.

Modes:
    strict:  strip to ``[A-Za-z0-9]``, at most 40 characters
    strict9: exactly 9 ``[A-Za-z0-9]`` characters (truncated or hashed)

Any other mode string takes the generic path with ``_`` as suffix separator.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections import deque
from dataclasses import dataclass, replace
from typing import Literal, assert_never

from ..clock import Clock, system_clock
from ..messages import (
    AssistantMessage,
    Message,
    SystemMessage,
    ToolCallBlock,
    ToolResultMessage,
    UserMessage,
)

logger = logging.getLogger(__name__)

ToolCallIdMode = Literal["strict", "strict9"]

STRICT9_LEN = 9
MAX_ID_LEN = 40
MAX_ATTEMPTS = 1000

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


@dataclass(frozen=True)
class ToolCallRef:
    """Id and name of one tool call inside an assistant message."""

    id: str
    name: str | None = None


def sanitize_tool_call_id(tool_call_id: str, mode: str = "strict") -> str:
    """
    Reduce a raw id to a provider-legal form.

    Examples:
        >>> sanitize_tool_call_id("call_abc-123")
        'callabc123'
        >>> sanitize_tool_call_id("call_abc-123", "strict9")
        'callabc12'
        >>> sanitize_tool_call_id("!!")
        'sanitizedtoolid'
    """
    alphanumeric = _NON_ALPHANUMERIC.sub("", tool_call_id)

    if mode == "strict9":
        if len(alphanumeric) >= STRICT9_LEN:
            return alphanumeric[:STRICT9_LEN]
        if alphanumeric:
            return _short_hash(alphanumeric, STRICT9_LEN)
        return _short_hash("sanitized", STRICT9_LEN)

    return alphanumeric or "sanitizedtoolid"


def make_unique_tool_call_id(
    tool_call_id: str,
    used: set[str],
    mode: str = "strict",
    clock: Clock = system_clock,
) -> str:
    """
    Sanitize ``tool_call_id`` and pick a variant not present in ``used``.

    Deterministic for a fixed ``(tool_call_id, used, mode)`` except for the
    last-resort fallbacks, which mix in ``clock()`` once every candidate collided.
    ``used`` is only read; recording the returned id is the caller's job.
    """
    if mode == "strict9":
        candidate = sanitize_tool_call_id(tool_call_id, mode)
        if candidate not in used:
            return candidate

        for i in range(MAX_ATTEMPTS):
            hashed = _short_hash(f"{tool_call_id}:{i}", STRICT9_LEN)
            if hashed not in used:
                return hashed

        return _short_hash(f"{tool_call_id}:{clock()}", STRICT9_LEN)

    base = sanitize_tool_call_id(tool_call_id, mode)[:MAX_ID_LEN]
    if base not in used:
        return base

    digest = _short_hash(tool_call_id)
    separator = "" if mode == "strict" else "_"
    clipped = base[: MAX_ID_LEN - len(separator) - len(digest)]
    candidate = f"{clipped}{separator}{digest}"
    if candidate not in used:
        return candidate

    for i in range(2, MAX_ATTEMPTS):
        suffix = f"x{i}" if mode == "strict" else f"_{i}"
        retry = f"{candidate[: MAX_ID_LEN - len(suffix)]}{suffix}"
        if retry not in used:
            return retry

    stamp = f"t{clock()}" if mode == "strict" else f"_{clock()}"
    return f"{candidate[: MAX_ID_LEN - len(stamp)]}{stamp}"


def canonicalize_ids(
    messages: list[Message],
    mode: str = "strict",
    clock: Clock = system_clock,
) -> list[Message]:
    """
    Rewrite every tool-call id in the transcript to a unique, legal id.

    Calls and results share one ``old -> new`` mapping, so a result always
    ends up with the exact id its call was rewritten to. A raw id repeated on
    a later tool call gets a fresh id; results after that point follow the
    newest call.

    Returns:
        The same list object when no id changed, else a new list.
    """
    remapper = _IdRemapper(mode, clock)
    changed = False
    out: list[Message] = []

    for msg in messages:
        if isinstance(msg, AssistantMessage):
            updated: Message = _rewrite_assistant(msg, remapper)
        elif isinstance(msg, ToolResultMessage):
            updated = _rewrite_tool_result(msg, remapper)
        elif isinstance(msg, (UserMessage, SystemMessage)):
            updated = msg
        else:
            assert_never(msg)

        changed = changed or updated is not msg
        out.append(updated)

    if changed:
        logger.debug(f"Rewrote {remapper.rewritten} tool call id(s) in {mode} mode")
    return out if changed else messages


def extract_tool_calls(message: AssistantMessage) -> list[ToolCallRef]:
    """Tool calls of an assistant message, in call order."""
    if isinstance(message.content, str):
        return []

    calls: list[ToolCallRef] = []
    for block in message.content:
        if not isinstance(block, ToolCallBlock):
            continue
        if not isinstance(block.id, str) or not block.id:
            continue
        name = block.name if isinstance(block.name, str) else None
        calls.append(ToolCallRef(id=block.id, name=name))
    return calls


def collect_tool_call_ids(messages: list[Message]) -> set[str]:
    """Every call id and result reference id appearing in a transcript."""
    ids: set[str] = set()
    for msg in messages:
        if isinstance(msg, AssistantMessage):
            ids.update(call.id for call in extract_tool_calls(msg))
        elif isinstance(msg, ToolResultMessage):
            if msg.reference_id:
                ids.add(msg.reference_id)
    return ids


class _IdRemapper:
    """Internal: per-call id mapping shared by calls and results."""

    __slots__ = ("mode", "clock", "mapping", "used", "rewritten", "_claimed", "_pending")

    def __init__(self, mode: str, clock: Clock):
        self.mode = mode
        self.clock = clock
        self.mapping: dict[str, str] = {}
        self.used: set[str] = set()
        self.rewritten = 0
        # raw ids already carried by a tool-call block
        self._claimed: set[str] = set()
        # calls of the current assistant turn not yet answered, per raw id
        self._pending: dict[str, deque[str]] = {}

    def start_turn(self) -> None:
        self._pending.clear()

    def resolve_call(self, raw_id: str) -> str:
        if raw_id in self._claimed:
            new_id = self._assign(raw_id)
        else:
            self._claimed.add(raw_id)
            new_id = self.resolve(raw_id)
        self._pending.setdefault(raw_id, deque()).append(new_id)
        return new_id

    def resolve_result(self, raw_id: str) -> str:
        """Bind a result to the oldest unanswered call of this turn with the same raw id."""
        pending = self._pending.get(raw_id)
        if pending:
            return pending.popleft()
        return self.resolve(raw_id)

    def resolve(self, raw_id: str) -> str:
        existing = self.mapping.get(raw_id)
        if existing is not None:
            return existing
        return self._assign(raw_id)

    def _assign(self, raw_id: str) -> str:
        new_id = make_unique_tool_call_id(raw_id, self.used, self.mode, self.clock)
        self.mapping[raw_id] = new_id
        self.used.add(new_id)
        if new_id != raw_id:
            self.rewritten += 1
        return new_id


def _rewrite_assistant(
    message: AssistantMessage, remapper: _IdRemapper
) -> AssistantMessage:
    remapper.start_turn()
    if isinstance(message.content, str):
        return message

    changed = False
    content = []
    for block in message.content:
        if isinstance(block, ToolCallBlock) and isinstance(block.id, str) and block.id:
            new_id = remapper.resolve_call(block.id)
            if new_id != block.id:
                block = replace(block, id=new_id)
                changed = True
        content.append(block)

    return replace(message, content=content) if changed else message


def _rewrite_tool_result(
    message: ToolResultMessage, remapper: _IdRemapper
) -> ToolResultMessage:
    tool_call_id = message.tool_call_id or None
    tool_use_id = message.tool_use_id or None

    new_call_id = remapper.resolve_result(tool_call_id) if tool_call_id else None
    if tool_use_id and tool_use_id == tool_call_id:
        new_use_id = new_call_id
    else:
        new_use_id = remapper.resolve_result(tool_use_id) if tool_use_id else None

    if new_call_id == tool_call_id and new_use_id == tool_use_id:
        return message

    return replace(
        message,
        tool_call_id=new_call_id or message.tool_call_id,
        tool_use_id=new_use_id or message.tool_use_id,
    )


def _short_hash(text: str, length: int = 8) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:length]
