# src/opgraph/contracts/descriptor.py
"""Serialized graph descriptors.

A descriptor is the JSON/YAML form of a graph:

    root: tick
    nodes:
      - name: fast
        type: EMA
        init: {period: 2}
        inputSrc: [tick]

``inputSrc`` may be omitted, an empty string, a single specifier or a list.
An empty specifier means "no dependency" and is dropped here, so every
consumer of a NodeDescriptor sees only real dependency specifiers.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, Field, field_validator

PATH_SEPARATOR = "."


def _undotted(value: str) -> str:
    if PATH_SEPARATOR in value:
        raise ValueError(f"must not contain '{PATH_SEPARATOR}'")
    return value


class NodeDescriptor(BaseModel):
    """One node entry in a descriptor."""

    model_config = {"frozen": True, "populate_by_name": True}

    name: str = Field(min_length=1, description="Unique node name")
    type: str = Field(min_length=1, description="Registered operator type name")
    init: Any = Field(default=None, description="Constructor options for the operator")
    input_src: tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("inputSrc", "input_src", "input"),
        serialization_alias="inputSrc",
        description="Dependency specifiers: identifiers or dot-paths",
    )

    @field_validator("name")
    @classmethod
    def reject_dotted_name(cls, v: str) -> str:
        """Reject names containing the path separator."""
        return _undotted(v)

    @field_validator("input_src", mode="before")
    @classmethod
    def normalize_input_src(cls, v: Any) -> Any:
        """Accept None, a bare string or a list; drop empty specifiers."""
        if v is None:
            return ()
        if isinstance(v, str):
            return (v,) if v else ()
        if isinstance(v, (list, tuple)):
            return tuple(spec for spec in v if spec != "")
        return v


class GraphDescriptor(BaseModel):
    """A complete graph description: root identifier plus ordered nodes."""

    model_config = {"frozen": True}

    root: str = Field(min_length=1, description="Identifier bound to each input event")
    nodes: tuple[NodeDescriptor, ...] = Field(description="Nodes in declaration order")

    @field_validator("root")
    @classmethod
    def reject_dotted_root(cls, v: str) -> str:
        return _undotted(v)

    def dependencies(self) -> dict[str, tuple[str, ...]]:
        """Map each node name to its dependency specifiers.

        Later duplicates win; callers that care about duplicates check names
        before calling this.
        """
        return {node.name: node.input_src for node in self.nodes}

    def node(self, name: str) -> NodeDescriptor:
        """Return the first node entry named ``name``.

        Raises:
            KeyError: If no entry has that name
        """
        for entry in self.nodes:
            if entry.name == name:
                return entry
        raise KeyError(f"Node not found: {name}")


def parse_descriptor(descriptor: GraphDescriptor | Any) -> GraphDescriptor:
    """Coerce a mapping (or an already-parsed model) into a GraphDescriptor.

    Raises:
        pydantic.ValidationError: If the mapping does not match the schema
    """
    if isinstance(descriptor, GraphDescriptor):
        return descriptor
    return GraphDescriptor.model_validate(descriptor)
