"""
Transcript normalization pipeline.

Runs the repair stages in the fixed order a provider request needs:

    repair_inputs → canonicalize_ids (policy) → repair_pairing (policy)

Each stage consumes the previous stage's output. Counters from every stage
are collected into one report for logging and tests.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .clock import Clock, system_clock
from .messages import Message, ToolResultMessage
from .policy import TranscriptPolicy, resolve_transcript_policy
from .repair import canonicalize_ids, repair_inputs, repair_pairing

if TYPE_CHECKING:
    from .config.loader import PolicyOverride

logger = logging.getLogger(__name__)


@dataclass
class TranscriptRepairReport:
    """Repaired transcript plus what every stage changed."""

    messages: list[Message]
    original: list[Message]
    dropped_tool_calls: int = 0
    dropped_assistant_messages: int = 0
    ids_rewritten: bool = False
    dropped_duplicate_count: int = 0
    dropped_orphan_count: int = 0
    moved: bool = False
    added: list[ToolResultMessage] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True when the output is a different list than the input."""
        return self.messages is not self.original

    def summary(self) -> dict[str, Any]:
        """Counters only, for telemetry."""
        return {
            "dropped_tool_calls": self.dropped_tool_calls,
            "dropped_assistant_messages": self.dropped_assistant_messages,
            "ids_rewritten": self.ids_rewritten,
            "dropped_duplicate_count": self.dropped_duplicate_count,
            "dropped_orphan_count": self.dropped_orphan_count,
            "moved": self.moved,
            "added": len(self.added),
        }


def normalize_transcript(
    messages: list[Message],
    policy: TranscriptPolicy,
    clock: Clock = system_clock,
) -> TranscriptRepairReport:
    """
    Repair a transcript according to a resolved policy.

    Args:
        messages: Raw, possibly malformed transcript
        policy: Output of resolve_transcript_policy()
        clock: Time source for synthesized results and id fallbacks

    Returns:
        TranscriptRepairReport; ``messages`` is the input list itself when
        no stage changed anything.
    """
    inputs = repair_inputs(messages)
    report = TranscriptRepairReport(
        messages=inputs.messages,
        original=messages,
        dropped_tool_calls=inputs.dropped_tool_calls,
        dropped_assistant_messages=inputs.dropped_assistant_messages,
    )
    logger.debug(
        f"Input validation: dropped {inputs.dropped_tool_calls} tool call(s), "
        f"{inputs.dropped_assistant_messages} assistant message(s)"
    )

    if policy.sanitize_tool_call_ids:
        mode = policy.tool_call_id_mode or "strict"
        canonical = canonicalize_ids(report.messages, mode, clock)
        report.ids_rewritten = canonical is not report.messages
        report.messages = canonical
        logger.debug(f"Id canonicalization ({mode}): rewritten={report.ids_rewritten}")

    if policy.repair_tool_use_result_pairing:
        pairing = repair_pairing(
            report.messages,
            allow_synthetic=policy.allow_synthetic_tool_results,
            clock=clock,
        )
        report.messages = pairing.messages
        report.dropped_duplicate_count = pairing.dropped_duplicate_count
        report.dropped_orphan_count = pairing.dropped_orphan_count
        report.moved = pairing.moved
        report.added = pairing.added
        logger.debug(
            f"Pairing repair: added={len(pairing.added)}, "
            f"duplicates={pairing.dropped_duplicate_count}, "
            f"orphans={pairing.dropped_orphan_count}, moved={pairing.moved}"
        )

    if report.changed:
        logger.info(f"Repaired transcript of {len(messages)} message(s): {report.summary()}")

    return report


def prepare_transcript(
    messages: list[Message],
    provider: str | None,
    model_id: str | None,
    overrides: Mapping[str, PolicyOverride] | None = None,
    clock: Clock = system_clock,
) -> TranscriptRepairReport:
    """Resolve the policy for provider/model and normalize the transcript."""
    policy = resolve_transcript_policy(provider, model_id, overrides)
    logger.debug(f"Transcript policy for {provider}/{model_id}: {policy}")
    return normalize_transcript(messages, policy, clock)
