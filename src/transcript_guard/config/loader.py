"""
Transcript policy override management.

This module loads per-provider policy overrides from a YAML file at the
project root. Overrides cover providers the built-in lookup does not know
about, e.g. an OpenAI-compatible gateway that fronts a Mistral model.

File layout:

    providers:
      openrouter:
        sanitize_tool_call_ids: true
        tool_call_id_mode: strict9
"""

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


class PolicyOverride(BaseModel):
    """Fields left as None keep the value resolved from provider/model."""

    model_config = ConfigDict(extra="forbid")

    sanitize_tool_call_ids: bool | None = None
    tool_call_id_mode: Literal["strict", "strict9"] | None = None
    repair_tool_use_result_pairing: bool | None = None
    allow_synthetic_tool_results: bool | None = None


def get_config_path() -> Path:
    """
    Get the path to the policy override file.

    Looks for transcript_policy.yaml in the current working directory (project root).
    """
    return Path(os.getcwd()) / "transcript_policy.yaml"


def load_policy_overrides(path: Path | None = None) -> dict[str, PolicyOverride]:
    """
    Load per-provider policy overrides from YAML.

    Args:
        path: Override file; defaults to get_config_path()

    Returns:
        Mapping of lower-cased provider name to its override

    Raises:
        FileNotFoundError: If the override file doesn't exist
        ValueError: If the file layout or an override is invalid
    """
    config_path = path or get_config_path()
    logger.debug(f"Loading transcript policy overrides from: {config_path}")

    if not config_path.exists():
        raise FileNotFoundError(
            f"transcript_policy.yaml not found at {config_path}. "
            "Copy transcript_policy.yaml.example to transcript_policy.yaml to configure overrides."
        )

    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}

        if not isinstance(config, dict):
            raise ValueError(f"Expected a mapping at the top of {config_path}")

        providers = config.get("providers") or {}
        if not isinstance(providers, dict):
            raise ValueError(
                f"'providers' in {config_path} must map provider names to overrides"
            )

        overrides: dict[str, PolicyOverride] = {}
        for name, raw in providers.items():
            try:
                overrides[str(name).strip().lower()] = PolicyOverride.model_validate(
                    raw or {}
                )
            except ValidationError as e:
                raise ValueError(f"Invalid override for provider '{name}': {e}") from e

        logger.info(f"Loaded transcript policy overrides for {len(overrides)} provider(s)")
        return overrides
    except ValueError:
        raise
    except Exception as e:
        raise RuntimeError(f"Error loading transcript policy overrides: {e}") from e
