# src/opgraph/__init__.py
"""
opgraph: dependency-ordered operator graphs driven by an event stream.

Operators are composed into a DAG rooted at an input identifier. Each event
runs every operator once, in dependency order, and observers receive the
results in event order even when they do asynchronous work.
"""

__version__ = "0.1.0"
