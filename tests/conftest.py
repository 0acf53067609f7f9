"""
Pytest fixtures for transcript-guard tests.

Key fixture pattern:
- clock: deterministic time source, so synthesized results compare equal
- Transcripts are built with the helpers in tests/fixtures.py
"""

import pytest

from tests.fixtures import FIXED_NOW, fixed_clock


@pytest.fixture
def clock():
    """Clock pinned to FIXED_NOW milliseconds."""
    return fixed_clock


@pytest.fixture
def now() -> int:
    return FIXED_NOW
