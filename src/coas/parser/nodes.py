"""Tagged view over a plain document tree: scalars, mappings and sequences.

Rule checks walk this view instead of indexing raw dicts, so every access is
total: a missing key, or a key holding the wrong kind of node, yields
``None`` rather than raising.  Mapping nodes keep ``x-`` keys in their own
``extensions`` bucket, separate from the standard fields.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from coas.models.extension import EXTENSION_PREFIX

Scalar = str | int | float | bool | None


@dataclass(frozen=True)
class ScalarNode:
    value: Scalar


@dataclass(frozen=True)
class MappingNode:
    fields: dict[str, Node] = field(default_factory=dict)
    extensions: dict[str, Node] = field(default_factory=dict)

    def get(self, key: str) -> Node | None:
        if key.startswith(EXTENSION_PREFIX):
            return self.extensions.get(key)
        return self.fields.get(key)

    def mapping(self, key: str) -> MappingNode | None:
        node = self.get(key)
        return node if isinstance(node, MappingNode) else None

    def sequence(self, key: str) -> SequenceNode | None:
        node = self.get(key)
        return node if isinstance(node, SequenceNode) else None


@dataclass(frozen=True)
class SequenceNode:
    items: tuple[Node, ...] = ()

    def __iter__(self) -> Iterator[Node]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


Node = ScalarNode | MappingNode | SequenceNode


def build_tree(data: Any) -> Node:
    """Wrap a plain tree (as returned by the loader) in tagged nodes."""
    if isinstance(data, dict):
        fields: dict[str, Node] = {}
        extensions: dict[str, Node] = {}
        for key, value in data.items():
            key = str(key)
            bucket = extensions if key.startswith(EXTENSION_PREFIX) else fields
            bucket[key] = build_tree(value)
        return MappingNode(fields=fields, extensions=extensions)
    if isinstance(data, list):
        return SequenceNode(items=tuple(build_tree(item) for item in data))
    return ScalarNode(value=data)


def type_name(node: Node) -> str:
    """Name a node's value type in extension-rule vocabulary."""
    if isinstance(node, MappingNode):
        return "object"
    if isinstance(node, SequenceNode):
        return "array"
    value = node.value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "string"
