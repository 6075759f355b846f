# src/opgraph/engine/graph.py
"""Graph executor: runs every operator once per input event.

A Graph owns its nodes, the cached execution order and the value snapshot.
Passes never overlap: events are queued FIFO and drained by a single task,
and a pass's listeners and output sink finish before the next pass computes
anything. Stateful operators therefore always see inputs in arrival order,
however slow an asynchronous observer is.

Example:
    graph = Graph("tick")
    graph.add("fast", EMA(period=2)).depends("tick")
    graph.add("slow", EMA(period=3)).depends("tick")
    graph.on("fast", print_fast)
    snapshot = await graph.on_data(100)
"""

from __future__ import annotations

import asyncio
import inspect
from collections import defaultdict, deque
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import networkx as nx
import structlog

from opgraph.contracts.errors import DuplicateNodeError, GraphValidationError, NodeExecutionError
from opgraph.contracts.validation import GraphError, StructureError, ValidationResult
from opgraph.core.dag import build_dependency_graph, check_dependencies, execution_order
from opgraph.core.logging import pass_context
from opgraph.core.paths import PATH_SEPARATOR, DependencyPath, parse_paths, resolve_paths

if TYPE_CHECKING:
    from opgraph.contracts.descriptor import GraphDescriptor
    from opgraph.contracts.operator import Listener, Operator, OutputSink
    from opgraph.core.registry import OperatorRegistry

logger = structlog.get_logger(__name__)


class Node:
    """An operator bound to its parsed dependency specifiers.

    Specifiers are parsed once here; ``evaluate`` only performs lookups.
    """

    __slots__ = ("_paths", "input_paths", "operator")

    def __init__(self, operator: Operator, input_paths: Iterable[str] = ()) -> None:
        self.operator = operator
        self._paths: tuple[DependencyPath, ...] = parse_paths(input_paths)
        self.input_paths: tuple[str, ...] = tuple(path.spec for path in self._paths)

    @property
    def paths(self) -> tuple[DependencyPath, ...]:
        return self._paths

    def evaluate(self, snapshot: Mapping[str, Any]) -> Any:
        """Resolve dependencies against ``snapshot`` and run the operator."""
        return self.operator.update(*resolve_paths(self._paths, snapshot))

    def __repr__(self) -> str:
        return f"Node({type(self.operator).__name__}, input_paths={list(self.input_paths)!r})"


class NodeBuilder:
    """Returned by Graph.add() to attach dependency specifiers."""

    __slots__ = ("_graph", "_name")

    def __init__(self, graph: Graph, name: str) -> None:
        self._graph = graph
        self._name = name

    def depends(self, *specs: str) -> Graph:
        """Declare what the node reads, in operator argument order.

        Returns:
            The graph, for chaining further ``add`` calls
        """
        self._graph._rebind(self._name, specs)
        return self._graph


class _PendingPass:
    __slots__ = ("future", "value")

    def __init__(self, value: Any, future: asyncio.Future[dict[str, Any]]) -> None:
        self.value = value
        self.future = future


async def _settle(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


def _check_identifier(kind: str, name: str) -> None:
    if not name:
        raise ValueError(f"{kind} must be a non-empty string")
    if PATH_SEPARATOR in name:
        raise ValueError(f"{kind} '{name}' must not contain '{PATH_SEPARATOR}'")


class Graph:
    """Executable operator graph rooted at one input identifier.

    Usage:
        graph = Graph("tick")
        graph.add("ema", EMA(period=10)).depends("tick.price")
        graph.output(sink)
        await graph.on_data({"price": 101.5})
    """

    def __init__(self, root: str) -> None:
        _check_identifier("Graph root", root)
        self._root = root
        self._nodes: dict[str, Node] = {}
        self._order: list[str] | None = None
        self._state: dict[str, Any] = {}
        self._listeners: defaultdict[str, list[Listener]] = defaultdict(list)
        self._output: OutputSink | None = None
        self._pending: deque[_PendingPass] = deque()
        self._drain_task: asyncio.Task[None] | None = None
        self._pass_count = 0

    # === Construction ===

    @property
    def root(self) -> str:
        return self._root

    @property
    def nodes(self) -> Mapping[str, Node]:
        """Read-only view of the nodes, in insertion order."""
        return dict(self._nodes)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Number of non-empty dependency specifiers across all nodes."""
        return sum(len(node.paths) for node in self._nodes.values())

    def has_node(self, name: str) -> bool:
        return name in self._nodes

    def add(self, name: str, operator: Operator) -> NodeBuilder:
        """Add a node with no dependencies yet.

        Raises:
            ValueError: If ``name`` is empty or contains a path separator
            DuplicateNodeError: If ``name`` is already a node
        """
        self.add_node(name, Node(operator))
        return NodeBuilder(self, name)

    def add_node(self, name: str, node: Node) -> Graph:
        """Add a prebuilt node.

        A node may share the root's name. The event seeds that identifier and
        the node's output replaces it, so specifiers naming it read the node.

        Raises:
            ValueError: If ``name`` is empty or contains a path separator
            DuplicateNodeError: If ``name`` is already a node
        """
        _check_identifier("Node name", name)
        if name in self._nodes:
            raise DuplicateNodeError(f"Duplicate node name: '{name}'")
        self._nodes[name] = node
        self._order = None
        return self

    def _rebind(self, name: str, specs: Iterable[str]) -> None:
        node = self._nodes[name]
        self._nodes[name] = Node(node.operator, [*node.input_paths, *specs])
        self._order = None

    def output(self, callback: OutputSink) -> Graph:
        """Set the sink that receives every pass's full snapshot."""
        self._output = callback
        return self

    def on(self, name: str, callback: Listener) -> Graph:
        """Listen for values produced by one node.

        The callback receives ``(name, value)`` on passes where the node
        produced a value; suppressed passes are skipped.

        Raises:
            KeyError: If the node does not exist
        """
        if name not in self._nodes:
            raise KeyError(f"Node not found: {name}")
        self._listeners[name].append(callback)
        return self

    # === Analysis ===

    def dependencies(self) -> dict[str, tuple[str, ...]]:
        """Map each node name to its dependency specifiers."""
        return {name: node.input_paths for name, node in self._nodes.items()}

    def get_nx_graph(self) -> nx.DiGraph:
        """Return a frozen copy of the resolvable dependency graph."""
        return nx.freeze(build_dependency_graph(self._root, self.dependencies()))

    def topological_order(self) -> list[str]:
        """Return node names in execution order, cached until the graph changes.

        Raises:
            GraphValidationError: If the graph has a cycle
        """
        if self._order is None:
            dependencies = self.dependencies()
            try:
                self._order = execution_order(self._root, dependencies)
            except nx.NetworkXUnfeasible:
                raise GraphValidationError(ValidationResult.of(check_dependencies(self._root, dependencies))) from None
        return list(self._order)

    def validate(self) -> ValidationResult:
        """Validate the live graph.

        Structure checks that every operator exposes a callable ``update``.
        Types are already bound, so the unknown-type phase never reports.
        Cycle and reachability phases match descriptor validation, with
        unresolvable specifiers folded into their node's unreachability.
        """
        structure: list[GraphError] = [
            StructureError(message=f"Operator {type(node.operator).__name__} has no callable 'update'", path=name)
            for name, node in self._nodes.items()
            if not callable(getattr(node.operator, "update", None))
        ]
        result = ValidationResult.of(structure or check_dependencies(self._root, self.dependencies()))
        logger.debug("graph_validated", root=self._root, valid=result.valid, nodes=len(self._nodes))
        return result

    # === Execution ===

    def snapshot(self) -> dict[str, Any]:
        """Copy of the values committed by the last successful pass."""
        return dict(self._state)

    async def on_data(self, value: Any) -> dict[str, Any]:
        """Run one pass for ``value`` and return its snapshot.

        Calls made without awaiting earlier ones are queued; each pass
        computes only after the previous pass's callbacks have finished.

        Raises:
            NodeExecutionError: If an operator raised during this pass
            GraphValidationError: If the graph has a cycle
        """
        loop = asyncio.get_running_loop()
        pending = _PendingPass(value, loop.create_future())
        self._pending.append(pending)
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = loop.create_task(self._drain())
        return await pending.future

    update = on_data

    async def _drain(self) -> None:
        while self._pending:
            pending = self._pending.popleft()
            try:
                snapshot = await self._run_pass(pending.value)
            except asyncio.CancelledError:
                task = asyncio.current_task()
                if task is not None and task.cancelling():
                    self._cancel_pending(pending)
                    raise
                # a callback was cancelled, not the drain itself
                pending.future.cancel()
            except Exception as e:
                if not pending.future.done():
                    pending.future.set_exception(e)
            except BaseException:
                self._cancel_pending(pending)
                raise
            else:
                if not pending.future.done():
                    pending.future.set_result(snapshot)

    def _cancel_pending(self, current: _PendingPass) -> None:
        current.future.cancel()
        while self._pending:
            self._pending.popleft().future.cancel()

    async def _run_pass(self, value: Any) -> dict[str, Any]:
        order = self.topological_order()
        self._pass_count += 1
        with pass_context(self._root, self._pass_count):
            snapshot, produced = self._compute(value, order)
            for name, result in produced:
                for listener in self._listeners[name]:
                    await _settle(listener(name, result))
            if self._output is not None:
                await _settle(self._output(dict(snapshot)))
            logger.debug("pass_completed", nodes=len(order), notified=len(produced))
        return snapshot

    def _compute(self, value: Any, order: list[str]) -> tuple[dict[str, Any], list[tuple[str, Any]]]:
        """Compute one pass; commit the snapshot only if every node succeeds."""
        working = dict(self._state)
        working[self._root] = value
        produced: list[tuple[str, Any]] = []

        for name in order:
            try:
                result = self._nodes[name].evaluate(working)
            except Exception as e:
                logger.warning("node_failed", node=name, error=str(e))
                raise NodeExecutionError(name, self._pass_count, e) from e
            if result is None:
                continue
            working[name] = result
            if name in self._listeners:
                produced.append((name, result))

        self._state = working
        return dict(working), produced

    # === Loading ===

    @classmethod
    def from_json(
        cls,
        descriptor: GraphDescriptor | Mapping[str, Any],
        registry: OperatorRegistry,
        *,
        validate: bool = False,
    ) -> Graph:
        """Build a graph from a descriptor.

        Thin facade over opgraph.engine.loader.build_graph().
        """
        from opgraph.engine.loader import build_graph

        return build_graph(descriptor, registry, validate=validate)
