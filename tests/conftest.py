# tests/conftest.py
"""Shared test fixtures and helpers.

Test operators live in tests/fixtures/operators.py. Graphs built in tests
bind operator instances directly; only loader and descriptor-validation
tests go through the registry.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from opgraph.core.registry import OperatorRegistry
from tests.fixtures.operators import ALL_OPERATORS

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture
def registry() -> OperatorRegistry:
    """Registry with every test operator registered."""
    reg = OperatorRegistry()
    for ctor in ALL_OPERATORS:
        reg.register(ctor)
    return reg
