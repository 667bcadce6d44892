"""
Tests for the command-line interface
"""

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from conftest import SAMPLE_HTML
from pageaudit.cli import app, build_overrides
from pageaudit.core.document import DocumentError

runner = CliRunner()


def write_page(tmp_path):
    page = tmp_path / "page.html"
    page.write_text(SAMPLE_HTML, encoding="utf-8")
    return page


def test_build_overrides():
    assert build_overrides(None, None, False) == {}
    assert build_overrides("resource", 5.0, True) == {
        "profile": "resource",
        "phases": {"detector_timeout": 5.0, "heuristic_timeout": 5.0, "enable_enhancement": False},
    }


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "PageAudit v1.0.0" in result.output


def test_list_plugins():
    result = runner.invoke(app, ["list-plugins"])
    assert result.exit_code == 0
    assert "content_structure" in result.output
    assert "resource_strategy" in result.output


def test_audit_file_writes_all_formats(tmp_path):
    page = write_page(tmp_path)
    output_dir = tmp_path / "reports"

    result = runner.invoke(app, ["audit", "--file", str(page), "-o", str(output_dir),
                                 "--format", "all", "--no-enhancement", "-v", "0"])

    assert result.exit_code == 0, result.output
    assert len(list((output_dir / "json").glob("*.json"))) == 1
    assert len(list((output_dir / "html").glob("*.html"))) == 1
    assert len(list(output_dir.glob("opportunities_*.csv"))) == 1
    assert len(list(output_dir.glob("summary_*.txt"))) == 1


def test_audit_with_resource_profile(tmp_path):
    page = write_page(tmp_path)

    result = runner.invoke(app, ["audit", "-f", str(page), "-p", "resource",
                                 "-o", str(tmp_path / "out"), "-v", "0"])

    assert result.exit_code == 0, result.output
    assert "Critical Resources" in result.output


def test_audit_unknown_profile_aborts(tmp_path):
    page = write_page(tmp_path)

    result = runner.invoke(app, ["audit", "-f", str(page), "-p", "accessibility",
                                 "-o", str(tmp_path / "out"), "-v", "0"])

    assert result.exit_code == 1
    assert "Aborted" in result.output


def test_audit_requires_a_target():
    result = runner.invoke(app, ["audit"])
    assert result.exit_code == 1


def test_audit_rejects_unknown_format(tmp_path):
    page = write_page(tmp_path)
    result = runner.invoke(app, ["audit", "-f", str(page), "--format", "pdf"])
    assert result.exit_code == 1


def test_audit_missing_file(tmp_path):
    result = runner.invoke(app, ["audit", "-f", str(tmp_path / "absent.html"),
                                 "-o", str(tmp_path / "out"), "-v", "0"])
    assert result.exit_code == 1


def test_audit_bad_config(tmp_path):
    page = write_page(tmp_path)
    config = tmp_path / "config.yaml"
    config.write_text("cache:\n  policy: fifo\n", encoding="utf-8")

    result = runner.invoke(app, ["audit", "-f", str(page), "-c", str(config)])

    assert result.exit_code == 1
    assert "Configuration error" in result.output


def test_audit_passes_fractional_timeout_to_client(tmp_path):
    with patch("pageaudit.cli.HTTPClient") as client_cls, \
            patch("pageaudit.cli.Document.fetch", AsyncMock(side_effect=DocumentError("offline"))):
        result = runner.invoke(app, ["audit", "-u", "https://example.com/", "--timeout", "0.5",
                                     "-o", str(tmp_path / "out"), "-v", "0"])

    assert result.exit_code == 1
    assert client_cls.call_args.kwargs["timeout"] == 0.5
