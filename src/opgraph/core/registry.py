# src/opgraph/core/registry.py
"""Operator registry: name-keyed lookup of operator constructors.

Only the descriptor loader and the descriptor validator consult the
registry. Graphs built in code bind operator instances directly.

Usage:
    registry = OperatorRegistry().register(EMA).register(SMA)
    ema = registry.create("EMA", {"period": 10})
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any, TypeAlias

import structlog

from opgraph.contracts.errors import RegistrationError
from opgraph.contracts.operator import Operator, OperatorDoc

logger = structlog.get_logger(__name__)

OperatorFactory: TypeAlias = Callable[..., Operator]


def _declared_type(ctor: Any) -> str:
    """Extract the self-declared type name from a constructor's ``doc``.

    Raises:
        RegistrationError: If the constructor declares no type name
    """
    doc = getattr(ctor, "doc", None)
    if not isinstance(doc, Mapping):
        raise RegistrationError(f"{getattr(ctor, '__name__', ctor)!r} must declare a 'doc' mapping with a 'type' entry")
    type_name = doc.get("type")
    if not isinstance(type_name, str) or not type_name:
        raise RegistrationError(f"{getattr(ctor, '__name__', ctor)!r} doc must declare a non-empty 'type'")
    return type_name


class OperatorRegistry:
    """Maps declared operator type names to constructors.

    Registering the same constructor twice is a no-op. Registering a different
    constructor under a name that is already taken is a configuration error.
    """

    def __init__(self) -> None:
        self._types: dict[str, OperatorFactory] = {}

    def register(self, ctor: OperatorFactory) -> OperatorRegistry:
        """Register a constructor under its ``doc["type"]``.

        Returns:
            The registry, for chaining

        Raises:
            RegistrationError: If the constructor declares no type, or the
                type is already bound to another constructor
        """
        name = _declared_type(ctor)
        existing = self._types.get(name)
        if existing is not None and existing is not ctor:
            raise RegistrationError(
                f"Duplicate operator type: '{name}'. Already registered by {getattr(existing, '__name__', existing)!r}"
            )
        self._types[name] = ctor
        logger.debug("operator_registered", op_type=name)
        return self

    def get(self, name: str) -> OperatorFactory | None:
        return self._types.get(name)

    def has(self, name: str) -> bool:
        return name in self._types

    def names(self) -> list[str]:
        """Registered type names in registration order."""
        return list(self._types)

    def get_context(self, name: str) -> OperatorDoc | None:
        """Return the self-description declared by a registered type."""
        ctor = self._types.get(name)
        if ctor is None:
            return None
        doc: OperatorDoc = ctor.doc  # type: ignore[attr-defined]
        return doc

    def get_all_contexts(self) -> list[OperatorDoc]:
        """Return every registered type's self-description, in registration order."""
        return [ctor.doc for ctor in self._types.values()]  # type: ignore[attr-defined]

    def create(self, name: str, init: Any = None) -> Operator:
        """Instantiate a registered operator.

        A mapping ``init`` is passed as keyword arguments, any other non-None
        value as a single positional argument.

        Raises:
            KeyError: If ``name`` is not registered
        """
        ctor = self._types.get(name)
        if ctor is None:
            raise KeyError(f"Operator type not registered: {name}")
        if init is None:
            return ctor()
        if isinstance(init, Mapping):
            return ctor(**init)
        return ctor(init)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)
