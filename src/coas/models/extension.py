"""Custom extension rules: which ``x-`` fields must appear where, and with what type."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

EXTENSION_PREFIX = "x-"


class ExtensionLocation(StrEnum):
    ROOT = "root"
    SERVERS = "servers"
    TAGS = "tags"
    PARAMETERS = "parameters"
    REQUEST_BODY = "requestBody"


class ExtensionType(StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class ExtensionProperty(BaseModel):
    """Declared shape of an extension value.

    ``value_type`` stays a plain string: an unknown type is accepted when the
    configuration is loaded and simply never passes a type check.
    ``properties`` only applies to ``object`` values and ``items`` only to
    ``array`` values.

    ``required`` is either a flag or, for ``object`` values, the list of
    nested property names that must be present.  Any value other than
    ``false`` makes the field itself required.
    """

    value_type: str = Field(alias="type")
    required: bool | list[str] = True
    description: str | None = None
    properties: dict[str, ExtensionProperty] | None = None
    items: ExtensionProperty | None = None

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def is_required(self) -> bool:
        return self.required is not False

    def requires_property(self, name: str) -> bool:
        """Whether nested property *name* must be present on the value."""
        if isinstance(self.required, list):
            return name in self.required
        nested = (self.properties or {}).get(name)
        return nested is not None and nested.is_required


class ExtensionRule(ExtensionProperty):
    """A required custom extension attached to one section of the document."""

    name: str
    location: ExtensionLocation = Field(alias="in")

    @field_validator("name")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if not value.startswith(EXTENSION_PREFIX):
            raise ValueError(f"Extension name must start with '{EXTENSION_PREFIX}': {value!r}")
        return value
