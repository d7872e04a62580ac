"""Structural validation against the bundled OpenAPI 3.x JSON schema."""

from __future__ import annotations

import json
import logging
import re
from functools import cache
from importlib.resources import files
from typing import Any

from jsonschema import Draft202012Validator, FormatChecker
from jsonschema.exceptions import ValidationError

from coas.models.findings import (
    SCHEMA_VALIDATION,
    Finding,
    FindingKind,
    StructuralPath,
    format_path,
)
from coas.parser.locator import TextLocator

logger = logging.getLogger("coas.validation")

_SCHEMA_RESOURCE = "openapi-3.json"


@cache
def load_openapi_schema() -> dict[str, Any]:
    """Return the bundled schema (parsed once per process)."""
    resource = files("coas") / "schemas" / _SCHEMA_RESOURCE
    schema: dict[str, Any] = json.loads(resource.read_text(encoding="utf-8"))
    Draft202012Validator.check_schema(schema)
    return schema


def _pointer(path: StructuralPath) -> str:
    return "/" + format_path(path)


def _disallowed_properties(error: ValidationError) -> list[str]:
    """Keys of the offending mapping not covered by ``properties``/``patternProperties``."""
    instance = error.instance
    if not isinstance(instance, dict) or not isinstance(error.schema, dict):
        return []
    declared = error.schema.get("properties", {})
    patterns = list(error.schema.get("patternProperties", {}))
    return [
        key
        for key in instance
        if key not in declared and not any(re.search(p, key) for p in patterns)
    ]


class SchemaChecker:
    """Checks a parsed document against the structural OpenAPI schema.

    Every violation is reported; ``iter_errors`` is consumed to exhaustion so a
    document with several problems yields all of them in one pass.
    """

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        self._validator = Draft202012Validator(
            schema if schema is not None else load_openapi_schema(),
            format_checker=FormatChecker(),
        )

    def check(self, document: Any, locator: TextLocator | None = None) -> list[Finding]:
        findings: list[Finding] = []
        for error in self._validator.iter_errors(document):
            path: StructuralPath = tuple(error.absolute_path)
            if error.validator == "additionalProperties":
                for prop in _disallowed_properties(error):
                    findings.append(self._property_finding(path, prop, locator))
                continue
            findings.append(
                self._located(
                    Finding(
                        message=f"Schema validation error at {_pointer(path)}: {error.message}",
                        extension_name=SCHEMA_VALIDATION,
                        kind=FindingKind.SCHEMA_VIOLATION,
                        path=path,
                    ),
                    locator,
                )
            )
        logger.debug("Schema check produced %d finding(s)", len(findings))
        return findings

    def _property_finding(
        self, parent: StructuralPath, prop: str, locator: TextLocator | None
    ) -> Finding:
        path = (*parent, prop)
        finding = Finding(
            message=(
                f'Schema validation error: Property "{prop}" is not allowed '
                f"at {_pointer(parent)}"
            ),
            extension_name=SCHEMA_VALIDATION,
            kind=FindingKind.SCHEMA_VIOLATION,
            path=path,
        )
        finding = self._located(finding, locator)
        if finding.column is not None:
            finding = finding.model_copy(update={"end_column": finding.column + len(prop)})
        return finding

    @staticmethod
    def _located(finding: Finding, locator: TextLocator | None) -> Finding:
        if locator is None:
            return finding
        position = locator.locate(finding.path)
        if position is None:
            return finding
        return finding.model_copy(update={"line": position.line, "column": position.column})
