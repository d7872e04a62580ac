"""Loading custom extension rules from configuration data or files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from coas.models.extension import ExtensionRule
from coas.parser.loader import DocumentLoader, ParseError


class RuleConfigError(Exception):
    """Raised when a custom extension configuration cannot be loaded."""


class RuleConfig(BaseModel):
    """The configuration surface pushed into the validator on change."""

    custom_extensions: list[ExtensionRule] = Field([], alias="customExtensions")

    model_config = {"populate_by_name": True}


def load_rules(data: Any) -> tuple[ExtensionRule, ...]:
    """Parse ``{customExtensions: [...]}`` (or a bare list of rules).

    Raises ``RuleConfigError`` listing every invalid entry.
    """
    if data is None:
        return ()
    if isinstance(data, list):
        data = {"customExtensions": data}
    if not isinstance(data, dict):
        raise RuleConfigError(
            "Custom extension configuration must be a mapping with 'customExtensions' "
            f"or a list of rules, not {type(data).__name__}"
        )
    try:
        config = RuleConfig.model_validate(data)
    except ValidationError as exc:
        raise RuleConfigError(f"Invalid custom extension configuration: {exc}") from exc
    return tuple(config.custom_extensions)


def load_rules_file(path: Path, loader: DocumentLoader | None = None) -> tuple[ExtensionRule, ...]:
    """Load rules from a YAML or JSON file."""
    loader = loader or DocumentLoader()
    try:
        data = loader.load(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise RuleConfigError(f"Cannot read rules file {path}: {exc}") from exc
    except ParseError as exc:
        raise RuleConfigError(f"Rules file {path} is not valid YAML/JSON: {exc}") from exc
    return load_rules(data)
