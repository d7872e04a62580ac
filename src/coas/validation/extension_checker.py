"""Custom extension rules: presence and type of ``x-`` fields per document section."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from coas.models.extension import (
    ExtensionLocation,
    ExtensionProperty,
    ExtensionRule,
    ExtensionType,
)
from coas.models.findings import Finding, FindingKind, StructuralPath
from coas.parser.locator import TextLocator
from coas.parser.nodes import MappingNode, Node, ScalarNode, SequenceNode, build_tree, type_name

logger = logging.getLogger("coas.validation")

OPERATION_METHODS = ("get", "post", "put", "delete", "options", "head", "patch", "trace")
BODY_METHODS = ("post", "put", "patch")


def _is_string(node: Node) -> bool:
    return isinstance(node, ScalarNode) and isinstance(node.value, str)


def _is_number(node: Node) -> bool:
    return (
        isinstance(node, ScalarNode)
        and isinstance(node.value, (int, float))
        and not isinstance(node.value, bool)
    )


def _is_boolean(node: Node) -> bool:
    return isinstance(node, ScalarNode) and isinstance(node.value, bool)


_TYPE_CHECKS: dict[str, Callable[[Node], bool]] = {
    ExtensionType.STRING: _is_string,
    ExtensionType.NUMBER: _is_number,
    ExtensionType.BOOLEAN: _is_boolean,
    ExtensionType.OBJECT: lambda node: isinstance(node, MappingNode),
    ExtensionType.ARRAY: lambda node: isinstance(node, SequenceNode),
}


def matches_type(node: Node, value_type: str) -> bool:
    """True if *node* has the declared type.  Unknown types never match."""
    check = _TYPE_CHECKS.get(value_type)
    return check is not None and check(node)


@dataclass(frozen=True)
class _Target:
    """One mapping a rule applies to, with its path and a human label."""

    entry: MappingNode
    path: StructuralPath
    label: str | None = None


def _entries(sequence: SequenceNode | None) -> Iterator[tuple[int, MappingNode]]:
    """Every entry of *sequence*; entries that are not mappings hold no fields."""
    if sequence is None:
        return
    for index, item in enumerate(sequence):
        yield index, item if isinstance(item, MappingNode) else MappingNode()


def _path_items(root: MappingNode) -> Iterator[tuple[str, MappingNode]]:
    paths = root.mapping("paths")
    if paths is None:
        return
    for path_key, item in paths.fields.items():
        if isinstance(item, MappingNode):
            yield path_key, item


def _root_targets(root: MappingNode) -> Iterator[_Target]:
    yield _Target(root, ())


def _server_targets(root: MappingNode) -> Iterator[_Target]:
    for index, entry in _entries(root.sequence("servers")):
        yield _Target(entry, ("servers", index), f"servers[{index}]")


def _tag_targets(root: MappingNode) -> Iterator[_Target]:
    for index, entry in _entries(root.sequence("tags")):
        yield _Target(entry, ("tags", index), f"tags[{index}]")


def _parameter_targets(root: MappingNode) -> Iterator[_Target]:
    for path_key, item in _path_items(root):
        for index, param in _entries(item.sequence("parameters")):
            yield _Target(
                param,
                ("paths", path_key, "parameters", index),
                f"{path_key} parameters[{index}]",
            )
        for method in OPERATION_METHODS:
            operation = item.mapping(method)
            if operation is None:
                continue
            for index, param in _entries(operation.sequence("parameters")):
                yield _Target(
                    param,
                    ("paths", path_key, method, "parameters", index),
                    f"{path_key}.{method} parameters[{index}]",
                )


def _request_body_targets(root: MappingNode) -> Iterator[_Target]:
    for path_key, item in _path_items(root):
        for method in BODY_METHODS:
            operation = item.mapping(method)
            body = operation.mapping("requestBody") if operation is not None else None
            if body is not None:
                yield _Target(
                    body,
                    ("paths", path_key, method, "requestBody"),
                    f"{path_key}.{method} requestBody",
                )


_TARGETS: dict[ExtensionLocation, Callable[[MappingNode], Iterator[_Target]]] = {
    ExtensionLocation.ROOT: _root_targets,
    ExtensionLocation.SERVERS: _server_targets,
    ExtensionLocation.TAGS: _tag_targets,
    ExtensionLocation.PARAMETERS: _parameter_targets,
    ExtensionLocation.REQUEST_BODY: _request_body_targets,
}


class ExtensionChecker:
    """Walks the document sections named by each rule and checks its field.

    A rule is satisfied only by a field sitting directly on the entry it
    targets.  Optional rules (``required: false``) are type-checked when the
    field is present and otherwise ignored.  Object and array values are
    checked recursively against declared ``properties`` and ``items``.
    """

    def check(
        self,
        document: Any,
        content: str,
        rules: Sequence[ExtensionRule],
        locator: TextLocator | None = None,
    ) -> list[Finding]:
        root = build_tree(document)
        if not isinstance(root, MappingNode):
            root = MappingNode()
        if locator is None:
            locator = TextLocator(content)

        findings: list[Finding] = []
        for rule in rules:
            before = len(findings)
            for target in _TARGETS[rule.location](root):
                findings.extend(_RuleRun(rule, target, locator).check())
            logger.debug(
                "Rule %s (%s): %d finding(s)", rule.name, rule.location, len(findings) - before
            )
        return findings


class _RuleRun:
    """Checks of one rule against one target entry."""

    def __init__(self, rule: ExtensionRule, target: _Target, locator: TextLocator) -> None:
        self._rule = rule
        self._target = target
        self._where = f" in {target.label}" if target.label else ""
        self._locator = locator

    def check(self) -> list[Finding]:
        name = self._rule.name
        parent = self._target.path
        return self._check_value(
            self._target.entry.get(name),
            name,
            self._rule,
            parent,
            (*parent, name),
            required=self._rule.is_required,
        )

    def _check_value(
        self,
        node: Node | None,
        display: str,
        shape: ExtensionProperty,
        parent: StructuralPath,
        path: StructuralPath,
        required: bool,
    ) -> list[Finding]:
        if node is None:
            return [self._missing(display, path, parent)] if required else []
        if not matches_type(node, shape.value_type):
            return [
                self._finding(
                    f"Extension {display}{self._where} should be of type "
                    f"{shape.value_type}, got {type_name(node)}",
                    FindingKind.EXTENSION_TYPE_MISMATCH,
                    path,
                )
            ]

        findings: list[Finding] = []
        if isinstance(node, MappingNode):
            declared = shape.properties or {}
            for prop_name, prop_shape in declared.items():
                findings.extend(
                    self._check_value(
                        node.get(prop_name),
                        f"{display}.{prop_name}",
                        prop_shape,
                        path,
                        (*path, prop_name),
                        required=shape.requires_property(prop_name),
                    )
                )
            if isinstance(shape.required, list):
                for prop_name in shape.required:
                    if prop_name not in declared and node.get(prop_name) is None:
                        findings.append(
                            self._missing(f"{display}.{prop_name}", (*path, prop_name), path)
                        )
        if isinstance(node, SequenceNode) and shape.items is not None:
            for index, item in enumerate(node):
                findings.extend(
                    self._check_value(
                        item,
                        f"{display}[{index}]",
                        shape.items,
                        path,
                        (*path, index),
                        required=True,
                    )
                )
        return findings

    def _missing(self, display: str, path: StructuralPath, parent: StructuralPath) -> Finding:
        return self._finding(
            f"Missing required custom extension: {display}{self._where}",
            FindingKind.EXTENSION_MISSING,
            path,
            fallback=parent,
        )

    def _finding(
        self,
        message: str,
        kind: FindingKind,
        path: StructuralPath,
        fallback: StructuralPath | None = None,
    ) -> Finding:
        position = self._locator.locate(path)
        if position is None and fallback:
            position = self._locator.locate(fallback)
        return Finding(
            message=message,
            extension_name=self._rule.name,
            kind=kind,
            path=path,
            line=position.line if position else None,
            column=position.column if position else None,
        )
