# tests/fixtures/__init__.py
"""Shared test operators and descriptor files for opgraph tests."""

from pathlib import Path

DESCRIPTORS_DIR = Path(__file__).parent / "descriptors"

__all__ = ["DESCRIPTORS_DIR"]
