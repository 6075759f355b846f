# src/opgraph/core/dag/analysis.py
"""Dependency analysis shared by descriptor and live-graph validation.

Both validators reduce their input to the same shape, a root identifier plus
an ordered mapping of node name to dependency specifiers, and run the cycle
and reachability phases here.

Uses NetworkX for graph operations. Edges run from a dependency to the node
that reads it, so descendants of the root are the nodes it feeds.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TypeAlias

import networkx as nx

from opgraph.contracts.validation import CycleError, GraphError, UnreachableError
from opgraph.core.paths import parse_paths

DependencyMap: TypeAlias = Mapping[str, Sequence[str]]


def dependency_heads(specs: Sequence[str]) -> list[str]:
    """Head identifiers of non-empty specifiers, in order."""
    return [path.head for path in parse_paths(specs)]


def build_dependency_graph(root: str, dependencies: DependencyMap) -> nx.DiGraph:
    """Build a DiGraph over the root and every node, with resolvable edges only.

    Specifiers whose head is neither the root nor a node contribute no edge.
    Node insertion order follows ``dependencies`` so traversals are
    deterministic.
    """
    graph: nx.DiGraph = nx.DiGraph()
    graph.add_node(root)
    graph.add_nodes_from(dependencies)
    for name, specs in dependencies.items():
        for head in dependency_heads(specs):
            if head == root or head in dependencies:
                graph.add_edge(head, name)
    return graph


def find_cycle(root: str, dependencies: DependencyMap) -> CycleError | None:
    """Return one dependency cycle, searching from the root first.

    The depth-first search then continues from every node in declaration
    order, so cycles disconnected from the root are found too.
    """
    graph = build_dependency_graph(root, dependencies)
    try:
        edges = nx.find_cycle(graph, source=[root, *dependencies])
    except nx.NetworkXNoCycle:
        return None
    return CycleError(nodes=tuple(edge[0] for edge in edges))


def find_unreachable(root: str, dependencies: DependencyMap) -> UnreachableError | None:
    """Return every node and identifier that cannot be reached from the root.

    A node is reachable when it descends from the root or from a node with
    no dependencies (a constant or clock source). A node with any specifier
    whose head never resolves is unreachable, and the unresolved head is
    reported next to it.
    """
    graph = build_dependency_graph(root, dependencies)

    sources = [root, *(name for name, specs in dependencies.items() if not dependency_heads(specs))]
    reachable: set[str] = set(sources)
    for source in sources:
        reachable |= nx.descendants(graph, source)

    unresolved: dict[str, None] = {}
    broken: set[str] = set()
    for name, specs in dependencies.items():
        for head in dependency_heads(specs):
            if head != root and head not in dependencies:
                unresolved.setdefault(head)
                broken.add(name)

    offenders = [name for name in dependencies if name not in reachable or name in broken]
    offenders.extend(head for head in unresolved if head not in offenders)
    if not offenders:
        return None
    return UnreachableError(nodes=tuple(offenders))


def check_dependencies(root: str, dependencies: DependencyMap) -> list[GraphError]:
    """Run the cycle phase, then the reachability phase.

    Only the first phase with a finding is reported.
    """
    cycle = find_cycle(root, dependencies)
    if cycle is not None:
        return [cycle]
    unreachable = find_unreachable(root, dependencies)
    if unreachable is not None:
        return [unreachable]
    return []


def execution_order(root: str, dependencies: DependencyMap) -> list[str]:
    """Topological order of the nodes (root excluded).

    Ties are broken by declaration order, so independent nodes run in the
    order they were added. A node sharing the root's name is kept.

    Raises:
        nx.NetworkXUnfeasible: If the dependencies contain a cycle
    """
    graph = build_dependency_graph(root, dependencies)
    position = {root: -1}
    position.update((name, index) for index, name in enumerate(dependencies))
    ordered = nx.lexicographical_topological_sort(graph, key=position.__getitem__)
    return [name for name in ordered if name in dependencies]
