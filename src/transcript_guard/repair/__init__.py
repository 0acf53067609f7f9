"""
Transcript repair stages.

Each stage is a pure function over ``list[Message]`` that returns the input
list object unchanged when it has nothing to repair:

    repair_inputs      drop malformed tool-call blocks
    canonicalize_ids   rewrite tool-call ids to a unique, provider-legal form
    repair_pairing     one result per call, in call order, no orphans
"""

from .inputs import ToolCallInputRepairReport, repair_inputs
from .pairing import ToolUseRepairReport, make_missing_tool_result, repair_pairing
from .tool_call_id import (
    ToolCallIdMode,
    ToolCallRef,
    canonicalize_ids,
    collect_tool_call_ids,
    extract_tool_calls,
    make_unique_tool_call_id,
    sanitize_tool_call_id,
)

__all__ = [
    # Inputs
    "repair_inputs",
    "ToolCallInputRepairReport",
    # Ids
    "ToolCallIdMode",
    "ToolCallRef",
    "sanitize_tool_call_id",
    "make_unique_tool_call_id",
    "canonicalize_ids",
    "extract_tool_calls",
    "collect_tool_call_ids",
    # Pairing
    "repair_pairing",
    "make_missing_tool_result",
    "ToolUseRepairReport",
]
