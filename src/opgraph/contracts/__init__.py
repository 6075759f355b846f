"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core/engine.
Settings classes live in opgraph.core.config and are not re-exported here.

Import patterns:
    from opgraph.contracts import GraphDescriptor, ValidationResult, Operator
"""

from opgraph.contracts.descriptor import GraphDescriptor, NodeDescriptor, parse_descriptor
from opgraph.contracts.errors import (
    DescriptorError,
    DuplicateNodeError,
    GraphValidationError,
    NodeExecutionError,
    OpgraphError,
    RegistrationError,
    UnknownOperatorTypeError,
)
from opgraph.contracts.operator import Listener, Operator, OperatorDoc, OutputSink
from opgraph.contracts.validation import (
    CycleError,
    ErrorKind,
    GraphError,
    StructureError,
    UnknownTypeError,
    UnreachableError,
    ValidationResult,
    format_validation_error,
)

__all__ = [
    "CycleError",
    "DescriptorError",
    "DuplicateNodeError",
    "ErrorKind",
    "GraphDescriptor",
    "GraphError",
    "GraphValidationError",
    "Listener",
    "NodeDescriptor",
    "NodeExecutionError",
    "OpgraphError",
    "Operator",
    "OperatorDoc",
    "OutputSink",
    "RegistrationError",
    "StructureError",
    "UnknownOperatorTypeError",
    "UnknownTypeError",
    "UnreachableError",
    "ValidationResult",
    "format_validation_error",
    "parse_descriptor",
]
