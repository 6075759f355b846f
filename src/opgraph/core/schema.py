# src/opgraph/core/schema.py
"""Static analysis of serialized graph descriptors.

Nothing here constructs operators or executes a graph. These functions work
on the descriptor alone (plus a registry, for type checks), so they are safe
to run on untrusted or machine-generated descriptors before loading them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError

from opgraph.contracts.descriptor import GraphDescriptor, parse_descriptor
from opgraph.contracts.validation import (
    GraphError,
    StructureError,
    UnknownTypeError,
    ValidationResult,
)
from opgraph.core.dag import check_dependencies
from opgraph.core.registry import OperatorRegistry

logger = structlog.get_logger(__name__)


def _structure_errors(descriptor: GraphDescriptor | Any) -> tuple[GraphDescriptor | None, list[GraphError]]:
    try:
        parsed = parse_descriptor(descriptor)
    except ValidationError as e:
        errors: list[GraphError] = [
            StructureError(message=detail["msg"], path=".".join(str(part) for part in detail["loc"])) for detail in e.errors()
        ]
        return None, errors

    errors = []
    seen: set[str] = set()
    reported: set[str] = set()
    for index, node in enumerate(parsed.nodes):
        if node.name in seen and node.name not in reported:
            # reported at the first repeat, once per name
            reported.add(node.name)
            errors.append(StructureError(message=f"Duplicate node name: '{node.name}'", path=f"nodes.{index}.name"))
        seen.add(node.name)
    return parsed, errors


def validate_graph_schema(descriptor: GraphDescriptor | Any, registry: OperatorRegistry) -> ValidationResult:
    """Validate a descriptor without constructing it.

    Phases run in order and only the first phase with findings is reported:

    1. structure: schema shape, dotted names, duplicate node names
    2. unknown_type: one finding per node whose type is not registered
    3. cycle: one finding naming the nodes on a discovered cycle
    4. unreachable: one merged finding for unreachable nodes and
       identifiers that resolve to neither the root nor a node

    A node named like the root shares its identifier: the event seeds it and
    the node's output replaces it, so specifiers naming it read the node.

    Args:
        descriptor: Mapping in descriptor form, or a parsed GraphDescriptor
        registry: Registry used to resolve operator type names

    Returns:
        ValidationResult; never raises for invalid descriptors
    """
    parsed, errors = _structure_errors(descriptor)
    if errors or parsed is None:
        return _finish(ValidationResult.of(errors))

    unknown: list[GraphError] = [
        UnknownTypeError(node=node.name, op_type=node.type) for node in parsed.nodes if not registry.has(node.type)
    ]
    if unknown:
        return _finish(ValidationResult.of(unknown))

    return _finish(ValidationResult.of(check_dependencies(parsed.root, parsed.dependencies())))


def _finish(result: ValidationResult) -> ValidationResult:
    if not result.valid:
        logger.debug("descriptor_invalid", finding=result.errors[0].type.value, count=len(result.errors))
    return result


def graph_complexity(descriptor: GraphDescriptor | Any) -> int:
    """Node count plus the number of non-empty dependency specifiers.

    Raises:
        pydantic.ValidationError: If the descriptor is malformed
    """
    parsed = parse_descriptor(descriptor)
    return len(parsed.nodes) + sum(len(node.input_src) for node in parsed.nodes)


@dataclass(frozen=True, slots=True)
class GraphDiff:
    """Node-level differences between two descriptors.

    ``changed`` lists nodes present in both whose type, init options or
    dependency specifiers differ. All lists follow declaration order.
    """

    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()
    changed: tuple[str, ...] = ()
    root_changed: bool = False

    @property
    def empty(self) -> bool:
        return not (self.added or self.removed or self.changed or self.root_changed)


def graph_diff(before: GraphDescriptor | Any, after: GraphDescriptor | Any) -> GraphDiff:
    """Compare two descriptors node by node.

    Raises:
        pydantic.ValidationError: If either descriptor is malformed
    """
    old = parse_descriptor(before)
    new = parse_descriptor(after)
    old_nodes = {node.name: node for node in old.nodes}
    new_nodes = {node.name: node for node in new.nodes}

    return GraphDiff(
        added=tuple(name for name in new_nodes if name not in old_nodes),
        removed=tuple(name for name in old_nodes if name not in new_nodes),
        changed=tuple(name for name, node in new_nodes.items() if name in old_nodes and old_nodes[name] != node),
        root_changed=old.root != new.root,
    )
