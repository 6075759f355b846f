"""Exception hierarchy for graph construction, validation and execution.

Configuration errors are raised synchronously while a graph is being built.
Validation findings are returned as data (see contracts/validation.py) and
only become GraphValidationError when a caller asks for a validated load.
Execution faults surface as NodeExecutionError to the caller of the event
that triggered them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from opgraph.contracts.validation import ValidationResult


class OpgraphError(Exception):
    """Base class for all opgraph errors."""


class RegistrationError(OpgraphError, ValueError):
    """Raised when an operator constructor cannot be registered."""


class DescriptorError(OpgraphError, ValueError):
    """Raised when a graph descriptor is malformed and cannot be loaded."""


class UnknownOperatorTypeError(OpgraphError, KeyError):
    """Raised when a descriptor names an operator type with no registry entry.

    Attributes:
        node: Name of the node declaring the type
        op_type: The unresolved type name
    """

    def __init__(self, node: str, op_type: str) -> None:
        self.node = node
        self.op_type = op_type
        super().__init__(f"Unknown type '{op_type}' for node '{node}'")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class DuplicateNodeError(OpgraphError, ValueError):
    """Raised when a node name is already taken by another node."""


class GraphValidationError(OpgraphError, ValueError):
    """Raised when a validated load finds structural problems.

    Attributes:
        result: The full ValidationResult that failed
    """

    def __init__(self, result: ValidationResult) -> None:
        from opgraph.contracts.validation import format_validation_error

        self.result = result
        details = "; ".join(format_validation_error(error) for error in result.errors)
        super().__init__(f"Graph validation failed: {details}")


class NodeExecutionError(OpgraphError):
    """Raised when an operator fails during a pass.

    The original exception is chained as ``__cause__``. The pass that raised
    is discarded: the snapshot from the last successful pass stays current.

    Attributes:
        node: Name of the node whose operator raised
        pass_index: Sequence number of the failed pass (1-based)
    """

    def __init__(self, node: str, pass_index: int, cause: BaseException) -> None:
        self.node = node
        self.pass_index = pass_index
        super().__init__(f"Node '{node}' failed on pass {pass_index}: {type(cause).__name__}: {cause}")
