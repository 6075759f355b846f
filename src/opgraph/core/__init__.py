# src/opgraph/core/__init__.py
"""Core infrastructure: path resolution, registry, DAG analysis, config and logging."""

from opgraph.core.paths import DependencyPath, parse_path, parse_paths, resolve_paths
from opgraph.core.registry import OperatorRegistry
from opgraph.core.schema import GraphDiff, graph_complexity, graph_diff, validate_graph_schema

__all__ = [
    "DependencyPath",
    "GraphDiff",
    "OperatorRegistry",
    "graph_complexity",
    "graph_diff",
    "parse_path",
    "parse_paths",
    "resolve_paths",
    "validate_graph_schema",
]
