"""
Pytest configuration for the Accessibility Fixer.

Why this exists:
- The test suite imports backend modules using `backend.app.*`.
- Depending on pytest import mode / environment, the repository root may not be on `sys.path`,
  which makes `import backend...` fail during collection.

This file ensures the repo root is available on `sys.path` for all tests in a deterministic way.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Ensure the repository root is importable (so `import backend.app...` works).
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


ENRICHMENT_ENV_VARS = (
    "ENRICHMENT_PROVIDER",
    "ENRICHMENT_MODEL",
    "ENRICHMENT_TIMEOUT",
    "ENRICHMENT_API_KEY",
    "ENRICHMENT_BASE_URL",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove enrichment-related environment variables for the duration of a test."""
    for name in ENRICHMENT_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
