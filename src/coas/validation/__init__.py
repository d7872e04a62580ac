"""Structural schema checks and custom extension rules."""

from coas.validation.extension_checker import ExtensionChecker
from coas.validation.schema_checker import SchemaChecker

__all__ = ["ExtensionChecker", "SchemaChecker"]
