"""Recover line/column positions of structural paths from raw YAML text.

The loader discards source positions, so positions are re-derived here by a
line-oriented scan.  This is a heuristic, not a YAML parser:

* path segments are matched in order; a segment only matches a key or a
  sequence item sitting at the column of the first child seen under the
  previous match, and the scan gives up as soon as a line dedents out of
  that subtree.  This is stricter than a plain first-match scan over the
  whole text, which would resolve a key absent from one sequence entry to
  the same key in a later sibling entry; a path that is not in the text
  resolves to ``None`` instead.
* sequence items are counted per indentation level; counters are dropped
  when a plain key line appears at or left of their column, so every line at
  column 0 resets them.
* duplicate keys resolve to the first occurrence in document order.
* only keys made of letters, digits, ``_`` and ``-`` are recognised; quoted
  keys, ``/paths`` and other keys fall outside that set and are not located.
* flow collections (``{a: 1}``, ``[1, 2]``) are opaque.

Callers treat ``None`` as "position unknown" and pick their own fallback.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from coas.models.findings import StructuralPath

_KEY_RE = re.compile(r"^(?:-\s+)?([A-Za-z0-9_\-]+)\s*:")
_ITEM_RE = re.compile(r"^-(?:\s|$)")


class Position(NamedTuple):
    """1-based line and column."""

    line: int
    column: int


def _indentation(line: str) -> int:
    return len(line) - len(line.lstrip())


def locate(content: str, path: StructuralPath) -> Position | None:
    """Find the line/column of the last segment of *path* in *content*.

    Keys resolve to the column of the key itself; array indices resolve to the
    column just past the ``- `` marker of the matching item.
    """
    parts = [str(part) for part in path]
    if not parts:
        return None

    depth = 0
    scope = -1  # column of the last matched key or item
    scope_is_key = False
    child: int | None = None  # column of the children of the last match
    item_indices: dict[int, int] = {}  # column -> index of last item seen there

    for line_no, line in enumerate(content.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = _indentation(line)
        is_item = _ITEM_RE.match(stripped) is not None
        key_match = _KEY_RE.match(stripped)

        # A sequence may sit at the same column as the key that owns it.
        compact_item = is_item and scope_is_key and indent == scope
        if depth and indent <= scope and not compact_item:
            return None

        if is_item:
            for level in [lvl for lvl in item_indices if lvl > indent]:
                del item_indices[level]
            index = item_indices.get(indent, -1) + 1
            item_indices[indent] = index
            if child is None:
                child = indent
            if indent == child and str(index) == parts[depth]:
                depth += 1
                if depth == len(parts):
                    return Position(line_no, indent + 3)
                scope, scope_is_key, child = indent, False, None
        else:
            for level in [lvl for lvl in item_indices if lvl >= indent]:
                del item_indices[level]

        if key_match:
            column = indent + key_match.start(1)
            if child is None:
                child = column
            if column == child and key_match.group(1) == parts[depth]:
                depth += 1
                if depth == len(parts):
                    return Position(line_no, column + 1)
                scope, scope_is_key, child = column, True, None

    return None


class TextLocator:
    """Locates paths within one fixed text, memoising repeated lookups."""

    def __init__(self, content: str) -> None:
        self._content = content
        self._cache: dict[StructuralPath, Position | None] = {}

    def locate(self, path: StructuralPath) -> Position | None:
        key = tuple(path)
        if key not in self._cache:
            self._cache[key] = locate(self._content, key)
        return self._cache[key]
