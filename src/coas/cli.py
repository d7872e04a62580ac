"""``coas-lint``: validate OpenAPI files against the schema and custom extension rules.

Run via::

    coas-lint openapi.yaml --rules rules.yaml
    COAS_RULES_FILE=rules.yaml coas-lint api/*.yaml --format json

Settings are loaded from ``COAS_``-prefixed environment variables and a
``.env`` file; flags override them.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from coas import __version__
from coas.config import RuleConfigError, load_rules_file
from coas.models.extension import ExtensionRule
from coas.models.findings import Finding, ValidationResult
from coas.parser.loader import looks_like_openapi
from coas.service.document_validator import DocumentValidator
from coas.settings import Settings

logger = logging.getLogger("coas.cli")

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_USAGE = 2


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coas-lint",
        description="Validate OpenAPI documents and required custom x- extensions",
    )
    parser.add_argument("files", nargs="+", type=Path, help="OpenAPI YAML/JSON files")
    parser.add_argument(
        "-r", "--rules", type=Path, default=settings.rules_file,
        help="Custom extension rules file ({customExtensions: [...]})",
    )
    parser.add_argument(
        "-f", "--format", choices=["text", "json"], default=settings.output_format,
        help="Report format",
    )
    parser.add_argument(
        "--all", action="store_true", default=settings.lint_all,
        help="Also lint files that do not declare openapi: 3.x / swagger: 2.x",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def format_finding(filename: str, finding: Finding) -> str:
    """One report line; unresolved positions fall back to 1:1."""
    line = finding.line or 1
    column = finding.column or 1
    return (
        f"{filename}:{line}:{column}: {finding.severity} "
        f"[{finding.extension_name}] {finding.message}"
    )


def _text_report(results: dict[str, ValidationResult]) -> str:
    lines: list[str] = []
    for filename, result in results.items():
        for finding in [*result.errors, *result.warnings]:
            lines.append(format_finding(filename, finding))
    invalid = sum(1 for result in results.values() if not result.is_valid)
    lines.append(f"{len(results)} file(s) checked, {invalid} invalid")
    return "\n".join(lines)


def _json_report(results: dict[str, ValidationResult]) -> str:
    payload: list[dict[str, Any]] = [
        {"file": filename, **result.model_dump(mode="json", by_alias=True)}
        for filename, result in results.items()
    ]
    return json.dumps(payload, indent=2)


def main(argv: list[str] | None = None) -> int:
    """Lint the given files; returns the process exit status."""
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper())
    args = _build_parser(settings).parse_args(argv)

    rules: tuple[ExtensionRule, ...] = ()
    if args.rules is not None:
        try:
            rules = load_rules_file(args.rules)
        except RuleConfigError as exc:
            print(f"coas-lint: {exc}", file=sys.stderr)
            return EXIT_USAGE
    logger.info("coas-lint v%s (rules=%d, files=%d)", __version__, len(rules), len(args.files))

    validator = DocumentValidator(rules)
    results: dict[str, ValidationResult] = {}
    unreadable = 0
    for path in args.files:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"coas-lint: cannot read {path}: {exc}", file=sys.stderr)
            unreadable += 1
            continue
        if not args.all and not looks_like_openapi(content):
            logger.warning("Skipping %s: no openapi/swagger version marker", path)
            continue
        results[str(path)] = validator.validate(content)

    report = _json_report(results) if args.format == "json" else _text_report(results)
    print(report)
    if unreadable:
        return EXIT_USAGE
    if any(not result.is_valid for result in results.values()):
        return EXIT_INVALID
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
