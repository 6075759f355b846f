"""Tests for contracts package.

Covers the descriptor models, validation findings and the exception
hierarchy shared by core and engine.
"""
