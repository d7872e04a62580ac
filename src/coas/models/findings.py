"""Structured findings with optional source positions."""

from __future__ import annotations

from enum import StrEnum
from typing import Self

from pydantic import BaseModel, Field, model_validator

StructuralPath = tuple[str | int, ...]

PARSE_ERROR = "parse-error"
SCHEMA_VALIDATION = "schema-validation"


class Severity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class FindingKind(StrEnum):
    PARSE_ERROR = "parse_error"
    SCHEMA_VIOLATION = "schema_violation"
    EXTENSION_MISSING = "extension_missing"
    EXTENSION_TYPE_MISMATCH = "extension_type_mismatch"


def format_path(path: StructuralPath) -> str:
    """Render a structural path as ``servers/0/x-env``."""
    return "/".join(str(part) for part in path)


class Finding(BaseModel):
    """One reported validation outcome.

    ``line`` and ``column`` are 1-based and absent when the position could not
    be recovered from the source text; consumers pick their own fallback.
    """

    message: str
    severity: Severity = Severity.ERROR
    extension_name: str = Field(alias="extensionName")
    kind: FindingKind
    path: StructuralPath = ()
    line: int | None = None
    column: int | None = None
    end_column: int | None = Field(None, alias="endColumn")

    model_config = {"populate_by_name": True, "frozen": True}


class ValidationResult(BaseModel):
    """Result of validating one document."""

    is_valid: bool = Field(alias="isValid")
    errors: list[Finding] = []
    warnings: list[Finding] = []

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _check_validity(self) -> Self:
        if self.is_valid != (len(self.errors) == 0):
            raise ValueError("is_valid must be true exactly when there are no errors")
        return self

    @classmethod
    def from_findings(cls, findings: list[Finding]) -> ValidationResult:
        """Partition findings by severity, keeping their emission order."""
        errors = [f for f in findings if f.severity is Severity.ERROR]
        warnings = [f for f in findings if f.severity is Severity.WARNING]
        return cls(is_valid=not errors, errors=errors, warnings=warnings)
