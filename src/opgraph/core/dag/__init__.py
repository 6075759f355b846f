# src/opgraph/core/dag/__init__.py
"""DAG analysis for operator graphs: ordering, cycles and reachability."""

from opgraph.core.dag.analysis import (
    build_dependency_graph,
    check_dependencies,
    dependency_heads,
    execution_order,
    find_cycle,
    find_unreachable,
)

__all__ = [
    "build_dependency_graph",
    "check_dependencies",
    "dependency_heads",
    "execution_order",
    "find_cycle",
    "find_unreachable",
]
