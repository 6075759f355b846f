"""Operator capability contract.

An operator is any object with a synchronous ``update`` method. The engine
resolves a node's dependency values and passes them positionally; a return
value of ``None`` means "no output this cycle".
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, NotRequired, Protocol, TypeAlias, TypedDict, runtime_checkable


class OperatorDoc(TypedDict):
    """Self-description carried by an operator class as its ``doc`` attribute.

    Only ``type`` is consumed by the engine (it is the registry key). The
    remaining fields are free-form text for tooling and documentation.
    """

    type: str
    desc: NotRequired[str]
    init: NotRequired[str]
    input: NotRequired[str]
    output: NotRequired[str]
    update: NotRequired[str]


@runtime_checkable
class Operator(Protocol):
    """Anything that computes its next output from resolved inputs."""

    def update(self, *args: Any) -> Any:
        """Return the next output, or None to suppress this cycle."""
        ...


# Observers may be plain functions or coroutine functions. A returned
# awaitable is awaited before the next callback is dispatched.
Listener: TypeAlias = Callable[[str, Any], Awaitable[None] | None]
OutputSink: TypeAlias = Callable[[Mapping[str, Any]], Awaitable[None] | None]
