# tests/property/__init__.py
"""Property-based tests for opgraph.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of.

Test categories:
- core/: descriptor validation, execution order and pass semantics
"""
