"""YAML loader producing a plain, position-free document tree."""

from __future__ import annotations

import base64
import datetime
import re
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq, TaggedScalar
from ruamel.yaml.error import YAMLError
from ruamel.yaml.scalarbool import ScalarBoolean

# ---------------------------------------------------------------------------
# Safety limits
# ---------------------------------------------------------------------------

_MAX_DOCUMENT_SIZE = 5_000_000  # 5M characters
_MAX_NODE_COUNT = 100_000
_MAX_DEPTH = 64

_OPENAPI_MARKER_RE = re.compile(r"""^\s*openapi\s*:\s*['"]*3\.""")
_SWAGGER_MARKER_RE = re.compile(r"""^\s*swagger\s*:\s*['"]*2\.""")
_MARKER_SCAN_LINES = 10


class ParseError(Exception):
    """Raised when the text is not a well-formed YAML document."""


class DocumentSafetyError(ParseError):
    """Raised when YAML input violates safety constraints.

    Distinct from syntax errors: these indicate hostile or runaway input
    (alias bombs, excessive nesting, oversized documents).
    """


def looks_like_openapi(content: str) -> bool:
    """Return True if one of the first lines declares an OpenAPI/Swagger version."""
    for line in content.splitlines()[:_MARKER_SCAN_LINES]:
        if _OPENAPI_MARKER_RE.match(line) or _SWAGGER_MARKER_RE.match(line):
            return True
    return False


class DocumentLoader:
    """Parses YAML text into plain dicts, lists and scalars.

    ruamel.yaml keeps line/column info on its nodes, but nothing downstream
    relies on it: positions are recovered from the raw text by the locator.
    """

    def __init__(self) -> None:
        self._yaml = YAML()

    # -- safety checks -------------------------------------------------------

    @staticmethod
    def _check_document_size(content: str) -> None:
        if len(content) > _MAX_DOCUMENT_SIZE:
            raise DocumentSafetyError(
                f"YAML document exceeds maximum size "
                f"({len(content):,} chars > {_MAX_DOCUMENT_SIZE:,} limit)"
            )

    @staticmethod
    def _check_node_count(
        data: Any, limit: int = _MAX_NODE_COUNT, max_depth: int = _MAX_DEPTH
    ) -> None:
        """Post-parse walk rejecting documents with too many nodes or levels.

        Aliases are walked once per reference, so alias bombs hit the node limit.
        """
        count = 0
        stack: list[tuple[Any, int]] = [(data, 0)]
        while stack:
            node, depth = stack.pop()
            count += 1
            if count > limit:
                raise DocumentSafetyError(
                    f"YAML document exceeds maximum node count ({limit:,})"
                )
            if depth > max_depth:
                raise DocumentSafetyError(
                    f"YAML document exceeds maximum nesting depth ({max_depth})"
                )
            if isinstance(node, dict):
                stack.extend((value, depth + 1) for value in node.values())
            elif isinstance(node, list):
                stack.extend((item, depth + 1) for item in node)

    # -- public loading API --------------------------------------------------

    def load(self, path: Path) -> Any:
        """Load a YAML file and return the plain document tree."""
        with path.open("r", encoding="utf-8") as handle:
            content = handle.read()
        return self.load_string(content)

    def load_string(self, content: str) -> Any:
        """Parse YAML text.  An empty document loads as ``{}``.

        Raises ``ParseError`` with the parser's message on malformed input.
        """
        self._check_document_size(content)
        try:
            data = self._yaml.load(content)
        except YAMLError as exc:
            raise ParseError(str(exc)) from exc
        except (ValueError, TypeError) as exc:
            # Raised by the constructor for well-formed but unconstructible
            # scalars, e.g. `2024-13-45` or `!!int abc`.
            raise ParseError(str(exc)) from exc
        except RecursionError as exc:
            raise DocumentSafetyError(
                "YAML document is nested too deeply to be parsed"
            ) from exc
        if data is None:
            return {}
        self._check_node_count(data)
        return self._to_plain_value(data)

    def _to_plain_value(self, data: Any) -> Any:
        """Convert ruamel.yaml containers and scalar subclasses to builtins.

        Only dict, list, str, int, float, bool and None come out.  Custom-tagged
        scalars (`!custom foo`) keep their text; `!!binary` values keep their
        base64 form.
        """
        if data is None:
            return None
        if isinstance(data, (CommentedMap, dict)):
            return {str(k): self._to_plain_value(v) for k, v in data.items()}
        if isinstance(data, (CommentedSeq, list)):
            return [self._to_plain_value(item) for item in data]
        if isinstance(data, (bool, ScalarBoolean)):
            return bool(data)
        if isinstance(data, int):
            return int(data)
        if isinstance(data, float):
            return float(data)
        if isinstance(data, str):
            return str(data)
        if isinstance(data, (datetime.date, datetime.datetime)):
            # Keep timestamps textual, as the YAML 1.2 core schema does.
            return data.isoformat()
        if isinstance(data, TaggedScalar):
            return str(data.value)
        if isinstance(data, (bytes, bytearray)):
            return base64.b64encode(data).decode("ascii")
        return str(data)
