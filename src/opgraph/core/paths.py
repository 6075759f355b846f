# src/opgraph/core/paths.py
"""Dependency specifier parsing and resolution.

A specifier names the value a node reads: either a bare identifier
(``"fast"``) or a dot-path into a nested value (``"tick.price"``). The first
segment is the *head* and must name the graph root or a node.

Specifiers are parsed once when a node is built so the per-event hot path
never splits strings.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from opgraph.contracts.descriptor import PATH_SEPARATOR


@dataclass(frozen=True, slots=True)
class DependencyPath:
    """A parsed dependency specifier.

    ``parts`` is empty for flat keys; for dotted specifiers it holds every
    segment including the head.
    """

    spec: str
    head: str
    parts: tuple[str, ...] = ()

    @property
    def nested(self) -> bool:
        return bool(self.parts)

    def resolve(self, snapshot: Mapping[str, Any]) -> Any:
        """Read this path from a value snapshot.

        Returns None as soon as any segment is missing.
        """
        if not self.parts:
            return snapshot.get(self.head)

        value = snapshot.get(self.head)
        for segment in self.parts[1:]:
            if value is None:
                return None
            value = _lookup(value, segment)
        return value


def _lookup(value: Any, segment: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(segment)
    if isinstance(value, (list, tuple)) and segment.isdigit():
        index = int(segment)
        return value[index] if index < len(value) else None
    return getattr(value, segment, None)


def parse_path(spec: str | None) -> DependencyPath | None:
    """Parse one specifier; empty or absent means "no dependency"."""
    if not spec:
        return None
    if PATH_SEPARATOR not in spec:
        return DependencyPath(spec=spec, head=spec)
    parts = tuple(spec.split(PATH_SEPARATOR))
    return DependencyPath(spec=spec, head=parts[0], parts=parts)


def parse_paths(specs: Iterable[str | None]) -> tuple[DependencyPath, ...]:
    """Parse specifiers in order, dropping empty ones."""
    parsed = (parse_path(spec) for spec in specs)
    return tuple(path for path in parsed if path is not None)


def resolve_paths(paths: Iterable[DependencyPath], snapshot: Mapping[str, Any]) -> tuple[Any, ...]:
    """Resolve parsed paths into positional operator arguments."""
    return tuple(path.resolve(snapshot) for path in paths)
