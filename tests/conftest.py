"""Shared test fixtures for the customized OpenAPI linter."""

from __future__ import annotations

from pathlib import Path

import pytest

from coas.models.extension import ExtensionRule
from coas.parser.loader import DocumentLoader
from coas.service.document_validator import DocumentValidator
from coas.validation.extension_checker import ExtensionChecker
from coas.validation.schema_checker import SchemaChecker

FIXTURES_DIR = Path(__file__).parent / "fixtures"
PETSTORE_FILE = FIXTURES_DIR / "petstore.yaml"
RULES_FILE = FIXTURES_DIR / "rules.yaml"


@pytest.fixture
def loader() -> DocumentLoader:
    return DocumentLoader()


@pytest.fixture
def schema_checker() -> SchemaChecker:
    return SchemaChecker()


@pytest.fixture
def extension_checker() -> ExtensionChecker:
    return ExtensionChecker()


@pytest.fixture
def validator() -> DocumentValidator:
    return DocumentValidator()


@pytest.fixture
def petstore_rules() -> list[ExtensionRule]:
    """Rules that PETSTORE_YAML satisfies."""
    return [rule(name, location, value_type) for name, location, value_type in PETSTORE_RULES]


def rule(
    name: str, location: str = "root", value_type: str = "string", **extra: object
) -> ExtensionRule:
    """Build a rule the way it appears in configuration."""
    return ExtensionRule.model_validate({"name": name, "in": location, "type": value_type, **extra})


PETSTORE_RULES = [
    ("x-api-id", "root", "string"),
    ("x-env", "servers", "string"),
    ("x-team", "tags", "string"),
    ("x-internal", "parameters", "boolean"),
    ("x-audit", "requestBody", "boolean"),
]

BASE_DOC = """\
openapi: 3.1.0
info:
  title: x
  version: 1
"""

SERVERS_DOC = BASE_DOC + """\
servers:
  - url: a
  - url: b
    x-env: 1
"""

PETSTORE_YAML = """\
openapi: 3.1.0
info:
  title: Petstore
  version: 1.0.0
  x-owner: team-pets
x-api-id: petstore
servers:
  - url: https://api.example.com
    x-env: production
  - url: https://staging.example.com
    x-env: staging
tags:
  - name: pets
    x-team: core
paths:
  /pets:
    parameters:
      - name: tenant
        in: header
        x-internal: true
    get:
      tags:
        - pets
      parameters:
        - name: limit
          in: query
          x-internal: false
      responses:
        '200':
          description: OK
    post:
      requestBody:
        x-audit: true
        content:
          application/json:
            schema:
              type: object
      responses:
        '201':
          description: Created
"""
