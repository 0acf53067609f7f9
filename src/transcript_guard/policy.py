"""
Transcript policy lookup.

Decides, from the provider and model id of the next request, which repair
stages must run before the transcript is sent.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .repair.tool_call_id import ToolCallIdMode

if TYPE_CHECKING:
    from .config.loader import PolicyOverride

MISTRAL_HINTS = (
    "mistral",
    "mixtral",
    "codestral",
    "pixtral",
    "devstral",
    "ministral",
    "mistralai",
)


@dataclass(frozen=True)
class TranscriptPolicy:
    """Which repair stages run, and how."""

    sanitize_tool_call_ids: bool = False
    tool_call_id_mode: ToolCallIdMode | None = None
    repair_tool_use_result_pairing: bool = False
    allow_synthetic_tool_results: bool = False


def resolve_transcript_policy(
    provider: str | None,
    model_id: str | None,
    overrides: Mapping[str, PolicyOverride] | None = None,
) -> TranscriptPolicy:
    """
    Resolve the policy for a provider/model pair.

    Mistral-family models need 9-character ids, Anthropic and Google need
    sanitized ids and one result per call. Everything else passes through.

    Args:
        provider: Provider name, e.g. "anthropic" or "google-vertex"
        model_id: Model id, e.g. "mistral-large-latest"
        overrides: Per-provider overrides keyed by lower-cased provider name

    Example:
        >>> resolve_transcript_policy("mistral", "mistral-large-latest").tool_call_id_mode
        'strict9'
    """
    normalized_provider = (provider or "").strip().lower()
    normalized_model = (model_id or "").lower()

    mistral = _is_mistral(normalized_provider, normalized_model)
    anthropic = normalized_provider == "anthropic"
    google = normalized_provider.startswith("google") or "gemini" in normalized_model

    sanitize = mistral or anthropic or google
    mode: ToolCallIdMode | None = None
    if mistral:
        mode = "strict9"
    elif sanitize:
        mode = "strict"

    policy = TranscriptPolicy(
        sanitize_tool_call_ids=sanitize,
        tool_call_id_mode=mode,
        repair_tool_use_result_pairing=anthropic or google,
        allow_synthetic_tool_results=anthropic or google,
    )

    override = (overrides or {}).get(normalized_provider)
    if override is None:
        return policy
    return _apply_override(policy, override)


def _is_mistral(provider: str, model_id: str) -> bool:
    if provider == "mistral":
        return True
    return any(hint in model_id for hint in MISTRAL_HINTS)


def _apply_override(
    policy: TranscriptPolicy, override: PolicyOverride
) -> TranscriptPolicy:
    changes = override.model_dump(exclude_none=True)
    if "tool_call_id_mode" in changes:
        changes.setdefault("sanitize_tool_call_ids", True)
    if changes.get("sanitize_tool_call_ids") and policy.tool_call_id_mode is None:
        changes.setdefault("tool_call_id_mode", "strict")
    return replace(policy, **changes)
