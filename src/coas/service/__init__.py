"""Validation service consumed by hosts such as the CLI or an editor."""

from coas.service.document_validator import DocumentValidator, validate

__all__ = ["DocumentValidator", "validate"]
