"""Standardized Hypothesis settings profiles for property tests.

Provides consistent test intensity across all property test modules.
Import these instead of using inline @settings(max_examples=...).

Usage:
    from tests.property.settings import STANDARD_SETTINGS

    @given(graph=acyclic_descriptors())
    @STANDARD_SETTINGS
    def test_something(graph):
        ...

Tiers:
- DETERMINISM_SETTINGS: 500 examples - validation and ordering must be repeatable
- STANDARD_SETTINGS: 100 examples - Regular property tests
- QUICK_SETTINGS: 20 examples - Fast validation tests (simple rejection)
"""

from hypothesis import settings

DETERMINISM_SETTINGS = settings(max_examples=500, deadline=None)

STANDARD_SETTINGS = settings(max_examples=100, deadline=None)

QUICK_SETTINGS = settings(max_examples=20, deadline=None)
