"""Pydantic domain models for the customized OpenAPI linter."""

from coas.models.extension import (
    ExtensionLocation,
    ExtensionProperty,
    ExtensionRule,
    ExtensionType,
)
from coas.models.findings import (
    Finding,
    FindingKind,
    Severity,
    StructuralPath,
    ValidationResult,
)

__all__ = [
    "ExtensionLocation",
    "ExtensionProperty",
    "ExtensionRule",
    "ExtensionType",
    "Finding",
    "FindingKind",
    "Severity",
    "StructuralPath",
    "ValidationResult",
]
