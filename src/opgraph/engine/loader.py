# src/opgraph/engine/loader.py
"""Descriptor loader: turns a serialized descriptor into an executable Graph.

Loading is synchronous and all-or-nothing. Every operator is constructed
before the graph is returned; the first unresolved type or malformed entry
aborts the load and no partial graph escapes.

Loading does not check cycles or reachability unless asked to. Call
Graph.validate() (or pass ``validate=True``) before relying on a graph.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
import yaml
from pydantic import ValidationError

from opgraph.contracts.descriptor import GraphDescriptor, parse_descriptor
from opgraph.contracts.errors import DescriptorError, GraphValidationError, UnknownOperatorTypeError
from opgraph.engine.graph import Graph, Node

if TYPE_CHECKING:
    from opgraph.core.config import OpgraphSettings
    from opgraph.core.registry import OperatorRegistry

logger = structlog.get_logger(__name__)


def build_graph(
    descriptor: GraphDescriptor | Mapping[str, Any],
    registry: OperatorRegistry,
    *,
    validate: bool = False,
) -> Graph:
    """Construct a Graph from a descriptor and a populated registry.

    Args:
        descriptor: Mapping in descriptor form, or a parsed GraphDescriptor
        registry: Registry resolving each node's operator type
        validate: Run Graph.validate() and raise on any finding

    Returns:
        A new Graph with one node per descriptor entry, in file order

    Raises:
        DescriptorError: If the descriptor does not match the schema, or an
            operator constructor rejects its init options
        UnknownOperatorTypeError: If a node's type is not registered
        DuplicateNodeError: If a node name repeats
        GraphValidationError: If ``validate`` is set and validation fails
    """
    try:
        parsed = parse_descriptor(descriptor)
    except ValidationError as e:
        raise DescriptorError(f"Malformed graph descriptor: {e}") from e

    graph = Graph(parsed.root)
    for entry in parsed.nodes:
        if not registry.has(entry.type):
            raise UnknownOperatorTypeError(entry.name, entry.type)
        try:
            operator = registry.create(entry.type, entry.init)
        except Exception as e:
            raise DescriptorError(f"Cannot construct operator '{entry.type}' for node '{entry.name}': {e}") from e
        graph.add_node(entry.name, Node(operator, entry.input_src))

    logger.debug("graph_built", root=parsed.root, nodes=graph.node_count, edges=graph.edge_count)

    if validate:
        result = graph.validate()
        if not result.valid:
            raise GraphValidationError(result)
    return graph


def load_descriptor_file(path: Path) -> GraphDescriptor:
    """Read a YAML or JSON descriptor file.

    JSON is a subset of YAML, so one parser handles both.

    Raises:
        FileNotFoundError: If the file does not exist
        DescriptorError: If the file is not valid YAML/JSON or not a descriptor
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise DescriptorError(f"Cannot parse descriptor file {path}: {e}") from e
    try:
        return parse_descriptor(raw)
    except ValidationError as e:
        raise DescriptorError(f"Malformed graph descriptor in {path}: {e}") from e


def load_graph(path: Path, registry: OperatorRegistry, settings: OpgraphSettings | None = None) -> Graph:
    """Load a descriptor file and build its graph.

    Validation runs when ``settings.engine.validate_on_load`` is set (the
    default when no settings are given).
    """
    from opgraph.core.config import OpgraphSettings

    settings = settings or OpgraphSettings()
    descriptor = load_descriptor_file(path)
    return build_graph(descriptor, registry, validate=settings.engine.validate_on_load)
