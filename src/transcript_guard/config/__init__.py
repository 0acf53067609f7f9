"""
Transcript policy configuration.

Usage:
    from transcript_guard.config import load_policy_overrides

    overrides = load_policy_overrides()
    policy = resolve_transcript_policy("openrouter", "some-model", overrides)
"""

from transcript_guard.config.loader import (
    PolicyOverride,
    get_config_path,
    load_policy_overrides,
)

__all__ = ["load_policy_overrides", "get_config_path", "PolicyOverride"]
