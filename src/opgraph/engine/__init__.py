# src/opgraph/engine/__init__.py
"""Graph construction and execution.

Components:
    graph  -> Graph executor, Node and NodeBuilder
    loader -> descriptor loading (build_graph, load_graph)
"""

from opgraph.engine.graph import Graph, Node, NodeBuilder
from opgraph.engine.loader import build_graph, load_descriptor_file, load_graph

__all__ = [
    "Graph",
    "Node",
    "NodeBuilder",
    "build_graph",
    "load_descriptor_file",
    "load_graph",
]
