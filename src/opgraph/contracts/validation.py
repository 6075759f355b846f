# src/opgraph/contracts/validation.py
"""Validation findings and results.

Findings are plain data: validators return them, they never raise them.
Each finding carries a ``type`` tag matching its JSON form, so a result can
be serialized with ``to_dict()`` and compared across runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, TypeAlias


class ErrorKind(StrEnum):
    """Tag of a validation finding.

    Validation phases run in this order and stop at the first phase that
    reports anything.
    """

    STRUCTURE = "structure"
    UNKNOWN_TYPE = "unknown_type"
    CYCLE = "cycle"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True, slots=True)
class StructureError:
    """Malformed descriptor entry (missing field, wrong shape, duplicate name)."""

    message: str
    path: str = ""
    type: ErrorKind = field(default=ErrorKind.STRUCTURE, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "message": self.message, "path": self.path}


@dataclass(frozen=True, slots=True)
class UnknownTypeError:
    """A node declares an operator type the registry does not know."""

    node: str
    op_type: str
    type: ErrorKind = field(default=ErrorKind.UNKNOWN_TYPE, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "node": self.node, "opType": self.op_type}


@dataclass(frozen=True, slots=True)
class CycleError:
    """Nodes on one discovered dependency cycle, in traversal order."""

    nodes: tuple[str, ...]
    type: ErrorKind = field(default=ErrorKind.CYCLE, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "nodes": list(self.nodes)}


@dataclass(frozen=True, slots=True)
class UnreachableError:
    """Nodes not reachable from the root, plus identifiers that never resolve."""

    nodes: tuple[str, ...]
    type: ErrorKind = field(default=ErrorKind.UNREACHABLE, init=False)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "nodes": list(self.nodes)}


GraphError: TypeAlias = StructureError | UnknownTypeError | CycleError | UnreachableError


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a descriptor or a live graph."""

    errors: tuple[GraphError, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.errors

    @classmethod
    def of(cls, errors: list[GraphError] | tuple[GraphError, ...]) -> ValidationResult:
        return cls(errors=tuple(errors))

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": [error.to_dict() for error in self.errors]}


def format_validation_error(error: GraphError) -> str:
    """Render a single finding as one human-readable line."""
    match error:
        case StructureError(message=message, path=path):
            return f"Invalid structure at '{path}': {message}" if path else f"Invalid structure: {message}"
        case UnknownTypeError(node=node, op_type=op_type):
            return f"Unknown type '{op_type}' for node '{node}'"
        case CycleError(nodes=nodes):
            loop = [*nodes, nodes[0]] if nodes else []
            return f"Cycle detected: {' -> '.join(loop)}"
        case UnreachableError(nodes=nodes):
            return f"Unreachable from root: {', '.join(nodes)}"
    raise TypeError(f"Not a validation finding: {error!r}")
