"""Customized OpenAPI linter: schema checks plus user-declared ``x-`` extension rules."""

__version__ = "0.1.0"
