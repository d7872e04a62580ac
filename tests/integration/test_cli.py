"""End-to-end tests for the coas-lint command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from coas.cli import EXIT_INVALID, EXIT_OK, EXIT_USAGE, format_finding, main
from coas.models.findings import Finding, FindingKind
from tests.conftest import BASE_DOC, PETSTORE_FILE, RULES_FILE


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep a developer's .env or COAS_* variables out of the run."""
    monkeypatch.chdir(tmp_path)
    for name in ("COAS_RULES_FILE", "COAS_OUTPUT_FORMAT", "COAS_LINT_ALL", "COAS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content)
    return path


class TestTextReport:
    def test_reports_missing_server_extension(self, capsys: pytest.CaptureFixture) -> None:
        code = main([str(PETSTORE_FILE), "--rules", str(RULES_FILE)])
        out = capsys.readouterr().out
        assert code == EXIT_INVALID
        assert (
            f"{PETSTORE_FILE}:9:5: error [x-env] "
            "Missing required custom extension: x-env in servers[1]"
        ) in out
        assert out.strip().endswith("1 file(s) checked, 1 invalid")

    def test_valid_file(self, capsys: pytest.CaptureFixture) -> None:
        code = main([str(PETSTORE_FILE)])
        assert code == EXIT_OK
        assert "1 file(s) checked, 0 invalid" in capsys.readouterr().out

    def test_unlocated_finding_reported_at_start(
        self, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        doc = _write(tmp_path, "api.yaml", BASE_DOC)
        rules = _write(
            tmp_path, "rules.yaml", "customExtensions:\n  - {name: x-id, in: root, type: string}\n"
        )
        assert main([str(doc), "-r", str(rules)]) == EXIT_INVALID
        assert f"{doc}:1:1: error [x-id] Missing required custom extension: x-id" in (
            capsys.readouterr().out
        )

    def test_parse_error(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        doc = _write(tmp_path, "broken.yaml", "openapi: 3.1.0\ninfo: {title: x\n")
        assert main([str(doc)]) == EXIT_INVALID
        assert "[parse-error] Failed to parse YAML:" in capsys.readouterr().out


class TestJsonReport:
    def test_json_payload(self, capsys: pytest.CaptureFixture) -> None:
        code = main([str(PETSTORE_FILE), "--rules", str(RULES_FILE), "--format", "json"])
        payload = json.loads(capsys.readouterr().out)
        assert code == EXIT_INVALID
        assert len(payload) == 1
        report = payload[0]
        assert report["file"] == str(PETSTORE_FILE)
        assert report["isValid"] is False
        assert report["warnings"] == []
        error = report["errors"][0]
        assert error["extensionName"] == "x-env"
        assert error["path"] == ["servers", 1, "x-env"]
        assert (error["line"], error["column"]) == (9, 5)


class TestFileSelection:
    def test_non_openapi_file_skipped(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        chart = _write(tmp_path, "Chart.yaml", "name: chart\nversion: 1.0.0\n")
        assert main([str(chart)]) == EXIT_OK
        assert "0 file(s) checked, 0 invalid" in capsys.readouterr().out

    def test_all_lints_everything(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        chart = _write(tmp_path, "Chart.yaml", "name: chart\nversion: 1.0.0\n")
        assert main([str(chart), "--all"]) == EXIT_INVALID
        assert "[schema-validation]" in capsys.readouterr().out

    def test_rules_from_environment(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture
    ) -> None:
        monkeypatch.setenv("COAS_RULES_FILE", str(RULES_FILE))
        assert main([str(PETSTORE_FILE)]) == EXIT_INVALID
        assert "[x-env]" in capsys.readouterr().out


class TestUsageErrors:
    def test_bad_rules_file(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        rules = _write(tmp_path, "rules.yaml", "customExtensions:\n  - {name: env, in: root}\n")
        assert main([str(PETSTORE_FILE), "--rules", str(rules)]) == EXIT_USAGE
        assert "coas-lint:" in capsys.readouterr().err

    def test_missing_input_file(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        assert main([str(tmp_path / "absent.yaml")]) == EXIT_USAGE
        assert "cannot read" in capsys.readouterr().err

    def test_unreadable_file_does_not_hide_other_results(
        self, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        code = main(
            [str(tmp_path / "absent.yaml"), str(PETSTORE_FILE), "--rules", str(RULES_FILE)]
        )
        captured = capsys.readouterr()
        assert code == EXIT_USAGE
        assert "cannot read" in captured.err
        assert "[x-env]" in captured.out
        assert "1 file(s) checked, 1 invalid" in captured.out

    def test_no_files(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main([])
        assert excinfo.value.code == 2


class TestFormatFinding:
    def test_located(self) -> None:
        finding = Finding(
            message="m", extension_name="x-a", kind=FindingKind.EXTENSION_MISSING, line=3, column=7
        )
        assert format_finding("api.yaml", finding) == "api.yaml:3:7: error [x-a] m"

    def test_unlocated(self) -> None:
        finding = Finding(message="m", extension_name="x-a", kind=FindingKind.EXTENSION_MISSING)
        assert format_finding("api.yaml", finding) == "api.yaml:1:1: error [x-a] m"
