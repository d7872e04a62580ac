"""Validation entry point: raw text in, ``ValidationResult`` out."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from coas.models.extension import ExtensionRule
from coas.models.findings import PARSE_ERROR, Finding, FindingKind, ValidationResult
from coas.parser.loader import DocumentLoader, DocumentSafetyError, ParseError
from coas.parser.locator import TextLocator
from coas.validation.extension_checker import ExtensionChecker
from coas.validation.schema_checker import SchemaChecker

logger = logging.getLogger("coas.service")


class DocumentValidator:
    """Validates OpenAPI documents against the schema and the active rule set.

    The rule set is the only state kept between calls.  It is held as an
    immutable tuple and replaced wholesale by :meth:`update_rules`; each
    :meth:`validate` call reads one snapshot up front, so a concurrent update
    never changes the rules under a running validation.
    """

    def __init__(self, rules: Iterable[ExtensionRule] = ()) -> None:
        self._lock = threading.Lock()
        self._rules: tuple[ExtensionRule, ...] = tuple(rules)

        # Stateless collaborators, safe to share across calls.
        self._loader = DocumentLoader()
        self._schema_checker = SchemaChecker()
        self._extension_checker = ExtensionChecker()

    # -- rule set ------------------------------------------------------------

    @property
    def rules(self) -> tuple[ExtensionRule, ...]:
        """The active rule snapshot."""
        with self._lock:
            return self._rules

    def update_rules(self, rules: Iterable[ExtensionRule]) -> None:
        """Atomically replace the active rule set."""
        snapshot = tuple(rules)
        with self._lock:
            self._rules = snapshot
        logger.info("Custom extension rules updated (%d rule(s))", len(snapshot))

    # -- validation ----------------------------------------------------------

    def validate(self, content: str) -> ValidationResult:
        """Validate *content*.  Never raises for bad input.

        A parse failure short-circuits into a single unlocated error finding;
        otherwise schema findings come first, then extension findings in rule
        order.
        """
        rules = self.rules
        logger.debug("Validating document (length=%d, rules=%d)", len(content), len(rules))

        try:
            document = self._loader.load_string(content)
        except DocumentSafetyError as exc:
            logger.warning("Rejected unsafe YAML document: %s", exc)
            return self._parse_failure(str(exc))
        except ParseError as exc:
            logger.debug("YAML parse failed: %s", exc)
            return self._parse_failure(str(exc))

        locator = TextLocator(content)
        findings: list[Finding] = []
        findings.extend(self._schema_checker.check(document, locator))
        findings.extend(self._extension_checker.check(document, content, rules, locator))

        result = ValidationResult.from_findings(findings)
        logger.debug(
            "Validation finished: %d error(s), %d warning(s)",
            len(result.errors),
            len(result.warnings),
        )
        return result

    @staticmethod
    def _parse_failure(message: str) -> ValidationResult:
        finding = Finding(
            message=f"Failed to parse YAML: {message}",
            extension_name=PARSE_ERROR,
            kind=FindingKind.PARSE_ERROR,
        )
        return ValidationResult.from_findings([finding])


def validate(content: str, rules: Iterable[ExtensionRule] = ()) -> ValidationResult:
    """One-shot validation with an explicit rule set."""
    return DocumentValidator(rules).validate(content)
